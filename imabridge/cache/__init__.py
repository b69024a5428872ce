from .lookup_cache import LookupCache

__all__ = ["LookupCache"]
