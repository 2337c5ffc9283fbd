from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

router = APIRouter()


@router.get("/{full_path:path}", include_in_schema=False)
async def serve_frontend(full_path: str, request: Request) -> FileResponse:
    """Serve a file from the static bundle, falling back to index.html for client-side routes."""
    root = Path(request.app.state.static_dir).resolve()
    if full_path:
        candidate = (root / full_path).resolve()
        if candidate.is_relative_to(root) and candidate.is_file():
            return FileResponse(candidate)
    index = root / "index.html"
    if not index.is_file():
        raise HTTPException(status_code=404, detail="Not Found")
    return FileResponse(index)
