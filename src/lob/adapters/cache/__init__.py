"""Cache adapters."""

from lob.adapters.cache.binary_cache import BinaryCache


__all__ = ["BinaryCache"]
