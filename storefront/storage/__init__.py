"""
Storage abstractions.

- Store → the async interface every resolver talks to
- InMemoryStore → development / test implementation
"""

from storefront.storage.base import Store
from storefront.storage.local import InMemoryStore, create_local_storage

__all__ = [
    "Store",
    "InMemoryStore",
    "create_local_storage",
]
