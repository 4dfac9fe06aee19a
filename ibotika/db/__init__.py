from .db_manager import DbManager
from .deps import get_db, get_db_manager

__all__ = ["DbManager", "get_db", "get_db_manager"]
