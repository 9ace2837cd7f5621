"""Hot-deal board watcher that forwards new listings to Slack."""

__version__ = "0.1.0"
