from .state import JsonStateStore, StateError

__all__ = ["JsonStateStore", "StateError"]
