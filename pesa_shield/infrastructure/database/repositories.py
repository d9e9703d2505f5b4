"""Data access layer for key-value documents"""

from typing import Any, Optional
from sqlalchemy.orm import Session
from pesa_shield.infrastructure.database.models import KeyValueEntry


class KeyValueRepository:
    """Repository for JSON documents stored under a key"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[Any]:
        """Fetch the stored value, or None when the key is absent"""
        entry = self.db.get(KeyValueEntry, key)
        return entry.value if entry else None

    def put(self, key: str, value: Any) -> None:
        """Insert or overwrite the value for a key"""
        entry = self.db.get(KeyValueEntry, key)
        if entry is None:
            self.db.add(KeyValueEntry(key=key, value=value))
        else:
            entry.value = value
        self.db.flush()

    def delete(self, key: str) -> bool:
        """Remove a key; returns False if it was not present"""
        entry = self.db.get(KeyValueEntry, key)
        if entry is None:
            return False
        self.db.delete(entry)
        self.db.flush()
        return True
