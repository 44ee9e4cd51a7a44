"""Cloud filesystem operations."""

from __future__ import annotations

import asyncio
import json
import logging
import mimetypes
import os
import time
from pathlib import Path
from typing import IO, Any, Union

from ..exceptions import BackendError, ValidationError, error_from_body
from ..models import DirectoryHandle, FileEntry
from ._base import Resource

logger = logging.getLogger(__name__)

FileSource = Union[bytes, str, os.PathLike, IO[bytes]]


def split_path(path: str) -> tuple[str, str]:
    """Split ``/a/b/c`` into ``("/a/b", "c")``; the parent defaults to ``/``."""
    parent, _, name = path.rpartition("/")
    return parent or "/", name


def _read_source(file: FileSource, name: str | None) -> tuple[bytes, str]:
    """Return the content and file name of an upload source."""
    if isinstance(file, bytes):
        if not name:
            raise ValidationError("File name is required when uploading raw bytes", field="name")
        return file, name

    if isinstance(file, (str, os.PathLike)):
        local = Path(file)
        if not local.is_file():
            raise ValidationError(f"File not found: {local}", field="file")
        return local.read_bytes(), name or local.name

    content = file.read()
    if not name:
        name = Path(getattr(file, "name", "") or "").name
    if not name:
        raise ValidationError("File name is required", field="name")
    return content, name


class PuterFileSystem(Resource):
    """Files and directories in the user's Puter storage."""

    async def readdir(self, path: str) -> list[FileEntry]:
        """List the entries of a directory.

        Args:
            path: Directory path.

        Returns:
            Entries of the directory.
        """
        self._require(path, "Path is required", "path")
        data = await self._transport.post("/readdir", {"path": path})
        return [self._safe_validate(FileEntry, entry) for entry in data or []]

    async def mkdir(
        self,
        path: str,
        overwrite: bool = False,
        dedupe_name: bool = True,
        create_parents: bool = True,
    ) -> DirectoryHandle:
        """Create a directory.

        Args:
            path: Full path of the directory to create.
            overwrite: Replace an existing entry with the same name.
            dedupe_name: Let the server pick a free name on collision.
            create_parents: Create missing parent directories.

        Returns:
            The created directory.
        """
        self._require(path, "Path is required", "path")
        parent, name = split_path(path)

        data = await self._transport.post(
            "/mkdir",
            {
                "parent": parent,
                "path": name,
                "overwrite": overwrite,
                "dedupe_name": dedupe_name,
                "create_missing_parents": create_parents,
            },
        )
        return self._safe_validate(DirectoryHandle, data)

    async def get_info(self, path: str) -> FileEntry:
        """Get information about a file or directory."""
        self._require(path, "Path is required", "path")
        data = await self._transport.post("/stat", {"path": path})
        return self._safe_validate(FileEntry, data)

    async def rename(self, old_path: str, new_path: str) -> dict[str, Any]:
        """Rename a file or directory.

        Only the last segment of ``new_path`` is used; the entry stays in its
        directory.

        Args:
            old_path: Current path.
            new_path: Path carrying the new name.

        Returns:
            Result of the rename operation.
        """
        self._require(old_path and new_path, "Old and new paths are required")

        entry = await self.get_info(old_path)
        if not entry.uid:
            raise BackendError(f"No uid returned for {old_path}", "INVALID_RESPONSE")

        return await self._transport.post(
            "/rename",
            {"uid": entry.uid, "new_name": split_path(new_path)[1]},
        )

    async def upload(
        self,
        file: FileSource,
        path: str,
        name: str | None = None,
    ) -> dict[str, Any]:
        """Upload a file into a directory.

        Args:
            file: Local path, raw bytes or a binary file object.
            path: Destination directory.
            name: Name of the uploaded file. Defaults to the local file name.

        Returns:
            The batch response, ``{"results": [...]}``.

        Raises:
            ValidationError: If the source can't be read or has no name.
            BackendError: If the server rejected the write.
        """
        self._require(path, "Path is required", "path")
        content, name = await asyncio.to_thread(_read_source, file, name)
        content_type = mimetypes.guess_type(name)[0] or "application/octet-stream"

        logger.debug(f"Uploading {name} ({len(content)} bytes) to {path}")
        data = await self._transport.request(
            "POST",
            "/batch",
            data={
                "operation_id": str(int(time.time() * 1000)),
                "fileinfo": json.dumps({"name": name, "type": content_type, "size": len(content)}),
                "operation": json.dumps({"op": "write", "path": path, "name": name}),
            },
            files={"file": (name, content, content_type)},
        )

        results = data.get("results") if isinstance(data, dict) else None
        if results and isinstance(results[0], dict) and results[0].get("error"):
            raise error_from_body(results[0]["error"], None, "Upload failed")
        return data

    async def delete(self, path: str) -> dict[str, Any]:
        """Delete a file or directory."""
        self._require(path, "Path is required", "path")
        return await self._transport.post("/delete", {"path": path})
