import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from pydantic import ValidationError

from calllog.models.call_log import CallLog
from calllog.schemas.call_log import CallLogIn
from calllog.services.log_store import CallLogStore

logger = logging.getLogger(__name__)


class InvalidLogFormat(Exception):
    """The ingestion payload is not a list of logs."""


class InvalidLogEntry(Exception):
    def __init__(self, index: int, errors: List[Dict[str, Any]]) -> None:
        super().__init__(f"Invalid log entry at index {index}.")
        self.index = index
        self.errors = errors


@dataclass
class IngestResult:
    received: int
    inserted: int


def _validate(payload: Any) -> List[CallLogIn]:
    if not isinstance(payload, list):
        raise InvalidLogFormat("Invalid data format. Expected an array of logs.")
    candidates: List[CallLogIn] = []
    for index, raw in enumerate(payload):
        try:
            candidates.append(CallLogIn.model_validate(raw))
        except ValidationError as e:
            raise InvalidLogEntry(index, e.errors(include_url=False, include_context=False, include_input=False)) from e
    return candidates


async def ingest_logs(store: CallLogStore, payload: Any) -> IngestResult:
    """
    Persist the records of *payload* whose (phoneNumber, dateTime) is not stored yet.

    Repeated keys inside the same batch are collapsed to their first occurrence.
    Raises InvalidLogFormat / InvalidLogEntry before touching the store, and
    StorageError if the store fails.
    """
    candidates = _validate(payload)

    pairs = list(dict.fromkeys((c.phone_number, c.date_time) for c in candidates))
    existing = await store.find_matching_any(pairs)
    seen = {log.dedup_key for log in existing}

    new_logs: List[CallLogIn] = []
    for candidate in candidates:
        if candidate.dedup_key in seen:
            continue
        seen.add(candidate.dedup_key)
        new_logs.append(candidate)

    if new_logs:
        await store.insert_many(new_logs)
        logger.info("Received %d logs. Inserted %d new logs.", len(candidates), len(new_logs))
    else:
        logger.info("Received %d logs. No new logs to insert.", len(candidates))

    return IngestResult(received=len(candidates), inserted=len(new_logs))


async def list_logs(store: CallLogStore) -> List[CallLog]:
    return await store.find_all_sorted()
