import json
import logging
from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from calllog.config import MAX_BODY_BYTES
from calllog.schemas.call_log import CallLogOut
from calllog.services.log_service import InvalidLogEntry, InvalidLogFormat, ingest_logs, list_logs
from calllog.services.log_store import CallLogStore, StorageError

logger = logging.getLogger(__name__)

router = APIRouter()

_INVALID_FORMAT = {"message": "Invalid data format. Expected an array of logs."}


def get_store(request: Request) -> CallLogStore:
    return request.app.state.log_store


@router.get("/logs", response_model=List[CallLogOut])
async def get_logs(store: CallLogStore = Depends(get_store)):
    try:
        return await list_logs(store)
    except StorageError as e:
        return JSONResponse(status_code=500, content={"message": "Error fetching logs", "error": str(e)})


@router.post("/logs")
async def post_logs(request: Request, store: CallLogStore = Depends(get_store)) -> JSONResponse:
    # Bodies without a Content-Length are only measured once read
    raw = await request.body()
    if len(raw) > MAX_BODY_BYTES:
        logger.warning("Rejected %d byte body on POST /api/logs", len(raw))
        return JSONResponse(status_code=413, content={"message": "Request entity too large."})

    try:
        payload = json.loads(raw) if raw else None
    except ValueError:
        return JSONResponse(status_code=400, content=_INVALID_FORMAT)

    try:
        result = await ingest_logs(store, payload)
    except InvalidLogFormat:
        return JSONResponse(status_code=400, content=_INVALID_FORMAT)
    except InvalidLogEntry as e:
        return JSONResponse(status_code=400, content={"message": str(e), "error": e.errors})
    except StorageError as e:
        return JSONResponse(status_code=500, content={"message": "Error saving logs", "error": str(e)})

    if result.inserted:
        return JSONResponse(
            status_code=201,
            content={"message": f"{result.inserted} new logs saved successfully."},
        )
    return JSONResponse(status_code=200, content={"message": "No new logs to save."})
