"""Durable storage for the rolling behavior profile"""

import logging
from datetime import datetime
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from pesa_shield.domain.exceptions import ProfileStorageError
from pesa_shield.domain.models import Transaction, UserBehaviorProfile
from pesa_shield.domain.profile import build_profile
from pesa_shield.infrastructure.database.repositories import KeyValueRepository
from pesa_shield.infrastructure.observability.metrics import profile_persist_failures_counter

logger = logging.getLogger(__name__)


class ProfileStore:
    """
    Holds the in-memory profile and mirrors it to key-value storage.

    Storage errors never reach the caller: a failed load yields the
    default profile and a failed write leaves the in-memory profile
    authoritative until the next successful write.
    """

    def __init__(self, session_factory: sessionmaker, storage_key: str):
        self._session_factory = session_factory
        self.storage_key = storage_key
        self.profile = UserBehaviorProfile()

    def load(self) -> UserBehaviorProfile:
        try:
            document = self._read_document()
        except ProfileStorageError as e:
            logger.warning(f"Using default behavior profile: {e}", extra={"storage_key": self.storage_key})
            document = None

        self.profile = UserBehaviorProfile.from_document(document) if document else UserBehaviorProfile()
        return self.profile

    def update(self, history: Sequence[Transaction], now: datetime) -> UserBehaviorProfile:
        """Recompute the profile from the full history and persist it"""
        self.profile = build_profile(history, now, previous=self.profile)
        self.save()
        return self.profile

    def save(self) -> bool:
        try:
            self._write_document(self.profile.to_document())
        except ProfileStorageError as e:
            profile_persist_failures_counter.inc()
            logger.error(f"Failed to persist behavior profile: {e}", extra={"storage_key": self.storage_key})
            return False
        return True

    def clear(self) -> None:
        """Reset to defaults and drop the stored document"""
        self.profile = UserBehaviorProfile()
        try:
            with self._session_factory() as db:
                KeyValueRepository(db).delete(self.storage_key)
                db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to erase stored behavior profile: {e}", extra={"storage_key": self.storage_key})

    def _read_document(self) -> dict | None:
        """
        Raises:
            ProfileStorageError: On storage failure or a corrupt document
        """
        try:
            with self._session_factory() as db:
                document = KeyValueRepository(db).get(self.storage_key)
        except SQLAlchemyError as e:
            raise ProfileStorageError(f"storage unavailable: {e}") from e
        except ValueError as e:
            # Stored text that does not decode as JSON
            raise ProfileStorageError(f"undecodable profile document: {e}") from e

        if document is None:
            return None

        try:
            UserBehaviorProfile.from_document(document)
        except (ValueError, TypeError, OverflowError) as e:
            raise ProfileStorageError(f"corrupt profile document: {e}") from e
        return document

    def _write_document(self, document: dict) -> None:
        try:
            with self._session_factory() as db:
                KeyValueRepository(db).put(self.storage_key, document)
                db.commit()
        except SQLAlchemyError as e:
            raise ProfileStorageError(f"storage unavailable: {e}") from e
