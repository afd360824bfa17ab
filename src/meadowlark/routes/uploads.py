"""File upload endpoint — each request gets its own timestamped directory."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from fastapi import APIRouter, File, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


def _write_files(upload_dir: Path, contents: dict[str, bytes]) -> None:
    upload_dir.mkdir(parents=True, exist_ok=True)
    for name, content in contents.items():
        (upload_dir / name).write_bytes(content)


def build_upload_router(
    public_dir: Path, *, clock: Callable[[], float] = time.time
) -> APIRouter:
    """Files land in ``<public_dir>/uploads/<ms>/`` and are served at ``/uploads/<ms>/``.

    The whole request is rejected, and nothing is written, when any file
    name is empty, hidden or repeated.
    """
    router = APIRouter()

    @router.post("/upload")
    @router.post("/upload/{subpath:path}")
    async def upload(
        files: list[UploadFile] = File(...),  # noqa: B008
        subpath: str = "",
    ) -> dict[str, Any]:
        names: list[str] = []
        for upload_file in files:
            name = Path(upload_file.filename or "").name
            if not name or name.startswith("."):
                raise HTTPException(status_code=400, detail="Invalid file name")
            if name in names:
                raise HTTPException(status_code=400, detail="Duplicate file name")
            names.append(name)

        contents = {name: await f.read() for name, f in zip(names, files)}

        now = int(clock() * 1000)
        upload_dir = public_dir / "uploads" / str(now)
        upload_url = f"/uploads/{now}"
        await run_in_threadpool(_write_files, upload_dir, contents)

        saved = [
            {
                "name": name,
                "size": len(contents[name]),
                "type": upload_file.content_type,
                "url": f"{upload_url}/{name}",
            }
            for name, upload_file in zip(names, files)
        ]
        logger.info("Stored %d upload(s) in %s", len(saved), upload_dir)
        return {"files": saved}

    return router
