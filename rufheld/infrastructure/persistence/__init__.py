from .database import DEFAULT_LIST_LIMIT, Database, create_database

__all__ = ["DEFAULT_LIST_LIMIT", "Database", "create_database"]
