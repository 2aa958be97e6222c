"""Serve stored profile photos."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import FileResponse

from ..photos import get_photo_store

router = APIRouter(tags=["photos"])


@router.get("/photos/{name}")
def get_photo(name: str) -> FileResponse:
    return FileResponse(get_photo_store().path_for(name))
