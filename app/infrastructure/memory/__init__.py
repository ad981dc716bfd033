"""In-memory backend (database_backend=memory) implementing the repository protocols."""

from app.infrastructure.memory.store import InMemoryStore
from app.infrastructure.memory.unit_of_work import MemoryUnitOfWork

__all__ = ["InMemoryStore", "MemoryUnitOfWork"]
