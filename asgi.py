"""
asgi.py -- Application assembly for the movie list service.

Joins the JSON API (api/main.py) with the optional browser frontend. When
FRONTEND_DIR is set, any GET outside /api/ serves the matching file from that
directory, falling back to index.html so client-side routing works.

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from pathlib import Path

from fastapi import HTTPException
from fastapi.responses import FileResponse

from api.main import app
from core.config import get_settings

_frontend = get_settings().frontend_dir

if _frontend and Path(_frontend).is_dir():
    _root = Path(_frontend).resolve()
    _index = _root / "index.html"

    # Registered after the API routers, so it only sees paths they did not match.
    @app.get("/{path:path}", include_in_schema=False)
    async def frontend(path: str) -> FileResponse:
        if path.startswith("api/") or not _index.is_file():
            raise HTTPException(status_code=404, detail={"code": "not_found", "message": "Not found"})
        candidate = (_root / path).resolve()
        # Paths that escape the frontend directory get index.html, never the file.
        if candidate.is_file() and _root in candidate.parents:
            return FileResponse(candidate)
        return FileResponse(_index)
