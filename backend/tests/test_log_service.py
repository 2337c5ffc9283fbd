from unittest.mock import AsyncMock

import pytest

from calllog.models.call_log import CallLog
from calllog.services.log_service import InvalidLogEntry, InvalidLogFormat, ingest_logs, list_logs
from calllog.services.log_store import StorageError


def _log(phone, date_time, **extra):
    return {"phoneNumber": phone, "dateTime": date_time, "duration": 30, "type": "incoming", **extra}


def _store(existing=None):
    store = AsyncMock()
    store.find_matching_any.return_value = existing or []
    store.insert_many.side_effect = lambda records: len(records)
    return store


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"phoneNumber": "555"}, "logs", 42, None])
async def test_ingest_rejects_non_list(payload):
    store = _store()

    with pytest.raises(InvalidLogFormat):
        await ingest_logs(store, payload)

    store.find_matching_any.assert_not_called()
    store.insert_many.assert_not_called()


@pytest.mark.asyncio
async def test_ingest_empty_batch():
    store = _store()

    result = await ingest_logs(store, [])

    assert result.received == 0
    assert result.inserted == 0
    store.insert_many.assert_not_called()


@pytest.mark.asyncio
async def test_ingest_inserts_only_unseen_keys():
    store = _store(existing=[
        CallLog(phone_number="555", date_time="2024-01-01T10:00:00Z", duration=30, name="Bob", call_type="incoming"),
    ])

    result = await ingest_logs(store, [
        # same key, different details: still the same call
        _log("555", "2024-01-01T10:00:00Z", duration=99, name="Alice", type="missed"),
        _log("555", "2024-01-02T10:00:00Z"),
    ])

    assert result.received == 2
    assert result.inserted == 1
    pairs = store.find_matching_any.call_args[0][0]
    assert pairs == [("555", "2024-01-01T10:00:00Z"), ("555", "2024-01-02T10:00:00Z")]
    inserted = store.insert_many.call_args[0][0]
    assert [r.date_time for r in inserted] == ["2024-01-02T10:00:00Z"]


@pytest.mark.asyncio
async def test_ingest_collapses_repeated_keys_within_batch():
    store = _store()

    result = await ingest_logs(store, [
        _log("555", "2024-01-01T10:00:00Z", name="First"),
        _log("555", "2024-01-01T10:00:00Z", name="Second"),
        _log("777", "2024-01-01T10:00:00Z"),
    ])

    assert result.inserted == 2
    inserted = store.insert_many.call_args[0][0]
    assert [(r.phone_number, r.name) for r in inserted] == [("555", "First"), ("777", "Unknown")]


@pytest.mark.asyncio
async def test_ingest_nothing_new_skips_insert():
    store = _store(existing=[
        CallLog(phone_number="555", date_time="2024-01-01T10:00:00Z", duration=30, name="Unknown", call_type="incoming"),
    ])

    result = await ingest_logs(store, [_log("555", "2024-01-01T10:00:00Z")])

    assert result.inserted == 0
    store.insert_many.assert_not_called()


@pytest.mark.asyncio
async def test_ingest_invalid_entry_reports_index():
    store = _store()

    with pytest.raises(InvalidLogEntry) as exc_info:
        await ingest_logs(store, [_log("555", "2024-01-01T10:00:00Z"), {"phoneNumber": "777"}])

    assert exc_info.value.index == 1
    missing = {err["loc"][0] for err in exc_info.value.errors}
    assert {"dateTime", "duration", "type"} <= missing
    store.find_matching_any.assert_not_called()


@pytest.mark.asyncio
async def test_ingest_propagates_storage_error():
    store = _store()
    store.insert_many.side_effect = StorageError("connection refused")

    with pytest.raises(StorageError):
        await ingest_logs(store, [_log("555", "2024-01-01T10:00:00Z")])


@pytest.mark.asyncio
async def test_list_logs_returns_store_order():
    store = AsyncMock()
    store.find_all_sorted.return_value = ["newest", "oldest"]

    assert await list_logs(store) == ["newest", "oldest"]


@pytest.mark.asyncio
async def test_ingest_coerces_numeric_keys_for_dedup():
    store = _store(existing=[
        CallLog(phone_number="5551234", date_time="1704103200000", duration=30, name="Unknown", call_type="incoming"),
    ])

    result = await ingest_logs(store, [_log(5551234, 1704103200000)])

    assert result.inserted == 0
    assert store.find_matching_any.call_args[0][0] == [("5551234", "1704103200000")]


@pytest.mark.asyncio
async def test_ingest_rejects_non_finite_duration():
    store = _store()

    with pytest.raises(InvalidLogEntry) as exc_info:
        await ingest_logs(store, [_log("555", "2024-01-01T10:00:00Z", duration=float("nan"))])

    assert exc_info.value.errors[0]["loc"] == ("duration",)
    assert "input" not in exc_info.value.errors[0]
    store.insert_many.assert_not_called()
