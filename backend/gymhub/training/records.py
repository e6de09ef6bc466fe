"""
Training record sources consumed by the presence hub.
"""
import asyncio
from collections import defaultdict
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)


@runtime_checkable
class TrainingRecordSource(Protocol):
    """Anything that can list a user's training-module records."""

    async def fetch_records(self, user_id: str) -> List[Any]:
        ...


class SqlTrainingRecordSource:
    """Reads records from the user_training table."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        if session_factory is None:
            from ..db.session import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory

    def _query(self, user_id: str) -> List[Any]:
        from ..db.models import UserTraining

        session: Session = self._session_factory()
        try:
            rows = session.execute(
                select(UserTraining).where(UserTraining.user_id == user_id)
            ).scalars().all()
            return list(rows)
        finally:
            session.close()

    async def fetch_records(self, user_id: str) -> List[Any]:
        rows = await asyncio.to_thread(self._query, user_id)
        logger.debug(f"Fetched {len(rows)} training records for {user_id}")
        return rows


class InMemoryTrainingRecordSource:
    """Dict-backed source for tests and the in-memory demo mode."""

    def __init__(self, records: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self._records: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        for user_id, items in (records or {}).items():
            self._records[user_id].extend(items)

    def add(self, user_id: str, status: str, **fields: Any) -> None:
        self._records[user_id].append({"user_id": user_id, "status": status, **fields})

    async def fetch_records(self, user_id: str) -> List[Any]:
        return list(self._records.get(user_id, []))
