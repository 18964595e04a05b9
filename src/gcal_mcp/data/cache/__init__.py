from .pending_cache import PendingAuthorizationCache

__all__ = ["PendingAuthorizationCache"]
