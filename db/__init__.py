"""Database package for the CRM record exercises."""
from db.connection import dispose_engine, get_db, get_engine, init_schema
from db.errors import RecordNotFoundError, StoreError, ValidationError
from db.store import RecordStore, SqlRecordStore

__all__ = [
    "get_engine", "get_db", "init_schema", "dispose_engine",
    "RecordStore", "SqlRecordStore",
    "StoreError", "ValidationError", "RecordNotFoundError",
]
