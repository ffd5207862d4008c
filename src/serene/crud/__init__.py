from .storage import Storage
from .sql import SqlStorage
from .memory import MemoryStorage

__all__ = ["Storage", "SqlStorage", "MemoryStorage"]
