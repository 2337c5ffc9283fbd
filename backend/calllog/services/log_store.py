import logging
from typing import Iterable, List, Sequence, Tuple

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from calllog.models.call_log import CallLog
from calllog.schemas.call_log import CallLogIn

logger = logging.getLogger(__name__)

# Pairs per OR-query; keeps a 10 MB batch from becoming one huge statement
_LOOKUP_CHUNK = 250


class StorageError(Exception):
    """Any failure of the underlying database during a read or write."""


class CallLogStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_matching_any(self, pairs: Sequence[Tuple[str, str]]) -> List[CallLog]:
        """Return stored records whose (phone_number, date_time) equals any of *pairs*."""
        if not pairs:
            return []
        found: List[CallLog] = []
        try:
            async with self._session_factory() as session:
                for chunk in _chunks(pairs, _LOOKUP_CHUNK):
                    result = await session.execute(
                        select(CallLog).where(
                            or_(*[
                                and_(CallLog.phone_number == phone, CallLog.date_time == date_time)
                                for phone, date_time in chunk
                            ])
                        )
                    )
                    found.extend(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Failed to look up existing call logs: %s", e)
            raise StorageError(str(e)) from e
        return found

    async def insert_many(self, records: Sequence[CallLogIn]) -> int:
        try:
            async with self._session_factory() as session:
                session.add_all([
                    CallLog(
                        date_time=r.date_time,
                        duration=r.duration,
                        name=r.name,
                        phone_number=r.phone_number,
                        call_type=r.call_type,
                    )
                    for r in records
                ])
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to insert %d call logs: %s", len(records), e)
            raise StorageError(str(e)) from e
        return len(records)

    async def find_all_sorted(self) -> List[CallLog]:
        """All records, newest dateTime first."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(CallLog).order_by(CallLog.date_time.desc(), CallLog.id.desc())
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Failed to fetch call logs: %s", e)
            raise StorageError(str(e)) from e


def _chunks(items: Sequence[Tuple[str, str]], size: int) -> Iterable[Sequence[Tuple[str, str]]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]
