from planpact.storage.base import PactStore
from planpact.storage.memory import InMemoryStore
from planpact.storage.sql import SqlAlchemyStore

__all__ = ["PactStore", "InMemoryStore", "SqlAlchemyStore"]
