"""
erp_services -- Persistence, serialization and service wiring.

Top of the stack: key-value stores, the JSON codec for stored document
collections, repositories, and ``ErpContainer`` which builds every
module service from an ``ErpConfig``.
"""

from erp_services.container import ErpContainer
from erp_services.persistence import InMemoryKeyValueStore, KeyValueStore, SqlKeyValueStore
from erp_services.repository import DocumentRepository

__all__ = [
    "ErpContainer",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SqlKeyValueStore",
    "DocumentRepository",
]
