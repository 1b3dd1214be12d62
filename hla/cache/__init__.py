"""Cache module for HLA."""

from hla.cache.base import DiskStore
from hla.cache.query import CacheEntry, QueryCache, QueryKey
from hla.cache.session import SessionStore

__all__ = [
    "CacheEntry",
    "DiskStore",
    "QueryCache",
    "QueryKey",
    "SessionStore",
]
