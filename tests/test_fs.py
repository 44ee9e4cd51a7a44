"""Tests for filesystem operations."""

from __future__ import annotations

import io
import json
import threading

import pytest
from httpx import Response

from puter_sdk import Puter
from puter_sdk.exceptions import BackendError, NotFoundError, ValidationError
from puter_sdk.resources.fs import split_path

from .conftest import make_file_dict, request_json


class ThreadRecordingFile(io.BytesIO):
    """Binary file object remembering the thread it was read on."""

    read_thread: int | None = None

    def read(self, *args):
        self.read_thread = threading.get_ident()
        return super().read(*args)


class TestSplitPath:
    """Tests for split_path."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/a/b/c", ("/a/b", "c")),
            ("/c", ("/", "c")),
            ("c", ("/", "c")),
        ],
    )
    def test_split(self, path, expected):
        assert split_path(path) == expected


class TestReaddir:
    """Tests for listing directories."""

    @pytest.mark.asyncio
    async def test_readdir(self, respx_mock, api_base_url):
        """Test listing a directory."""
        entries = [make_file_dict(), make_file_dict(name="docs", uid="dir-1", is_dir=True)]
        route = respx_mock.post(f"{api_base_url}/readdir").mock(
            return_value=Response(200, json=entries)
        )

        async with Puter(api_key="tok") as client:
            result = await client.fs.readdir("/testuser/Desktop")

        assert [e.name for e in result] == ["notes.txt", "docs"]
        assert result[1].is_dir is True
        assert request_json(route.calls.last.request) == {"path": "/testuser/Desktop"}

    @pytest.mark.asyncio
    async def test_path_required(self):
        """Test missing path."""
        client = Puter(api_key="tok")

        with pytest.raises(ValidationError, match="Path is required"):
            await client.fs.readdir("")


class TestMkdir:
    """Tests for creating directories."""

    @pytest.mark.asyncio
    async def test_mkdir_defaults(self, respx_mock, api_base_url):
        """Test the request body built from a full path."""
        route = respx_mock.post(f"{api_base_url}/mkdir").mock(
            return_value=Response(200, json={"uid": "dir-9", "path": "/testuser/new"})
        )

        async with Puter(api_key="tok") as client:
            directory = await client.fs.mkdir("/testuser/new")

        assert directory.uid == "dir-9"
        assert request_json(route.calls.last.request) == {
            "parent": "/testuser",
            "path": "new",
            "overwrite": False,
            "dedupe_name": True,
            "create_missing_parents": True,
        }


class TestStatRenameDelete:
    """Tests for get_info, rename and delete."""

    @pytest.mark.asyncio
    async def test_get_info(self, respx_mock, api_base_url):
        """Test reading file information."""
        respx_mock.post(f"{api_base_url}/stat").mock(
            return_value=Response(200, json=make_file_dict())
        )

        async with Puter(api_key="tok") as client:
            entry = await client.fs.get_info("/testuser/Desktop/notes.txt")

        assert entry.uid == "file-1"
        assert entry.size == 42

    @pytest.mark.asyncio
    async def test_get_info_missing(self, respx_mock, api_base_url):
        """Test a missing path."""
        respx_mock.post(f"{api_base_url}/stat").mock(
            return_value=Response(
                404, json={"error": {"code": "subject_does_not_exist", "message": "Not found"}}
            )
        )

        async with Puter(api_key="tok") as client:
            with pytest.raises(NotFoundError):
                await client.fs.get_info("/testuser/missing")

    @pytest.mark.asyncio
    async def test_rename(self, respx_mock, api_base_url):
        """Test rename stats the old path, then renames by uid."""
        respx_mock.post(f"{api_base_url}/stat").mock(
            return_value=Response(200, json=make_file_dict())
        )
        route = respx_mock.post(f"{api_base_url}/rename").mock(
            return_value=Response(200, json=make_file_dict(name="todo.txt"))
        )

        async with Puter(api_key="tok") as client:
            result = await client.fs.rename(
                "/testuser/Desktop/notes.txt", "/testuser/Desktop/todo.txt"
            )

        assert result["name"] == "todo.txt"
        assert request_json(route.calls.last.request) == {"uid": "file-1", "new_name": "todo.txt"}

    @pytest.mark.asyncio
    async def test_delete(self, respx_mock, api_base_url):
        """Test deleting a path."""
        route = respx_mock.post(f"{api_base_url}/delete").mock(
            return_value=Response(200, json={})
        )

        async with Puter(api_key="tok") as client:
            await client.fs.delete("/testuser/Desktop/notes.txt")

        assert request_json(route.calls.last.request) == {"path": "/testuser/Desktop/notes.txt"}


class TestUpload:
    """Tests for multipart uploads."""

    @pytest.mark.asyncio
    async def test_upload_local_file(self, respx_mock, api_base_url, tmp_path):
        """Test the multipart body of an upload."""
        local = tmp_path / "hello.txt"
        local.write_bytes(b"hello world")

        route = respx_mock.post(f"{api_base_url}/batch").mock(
            return_value=Response(200, json={"results": [{"uid": "file-7"}]})
        )

        async with Puter(api_key="tok") as client:
            result = await client.fs.upload(local, "/testuser/Desktop")

        assert result["results"][0]["uid"] == "file-7"

        request = route.calls.last.request
        assert request.headers["Content-Type"].startswith("multipart/form-data; boundary=")
        body = request.content
        positions = [
            body.index(b'name="operation_id"'),
            body.index(b'name="fileinfo"'),
            body.index(b'name="operation"'),
            body.index(b'name="file"; filename="hello.txt"'),
        ]
        assert positions == sorted(positions)
        assert b"hello world" in body
        operation = json.dumps({"op": "write", "path": "/testuser/Desktop", "name": "hello.txt"})
        assert operation.encode() in body

    @pytest.mark.asyncio
    async def test_upload_file_object(self, respx_mock, api_base_url):
        """Test uploading from a file object with an explicit name."""
        route = respx_mock.post(f"{api_base_url}/batch").mock(
            return_value=Response(200, json={"results": [{"uid": "file-8"}]})
        )

        async with Puter(api_key="tok") as client:
            await client.fs.upload(io.BytesIO(b"\x89PNG"), "/", name="pic.png")

        assert b'filename="pic.png"' in route.calls.last.request.content
        assert b"image/png" in route.calls.last.request.content

    @pytest.mark.asyncio
    async def test_upload_reads_off_the_event_loop(self, respx_mock, api_base_url):
        """Test the local source is read in a worker thread."""
        route = respx_mock.post(f"{api_base_url}/batch").mock(
            return_value=Response(200, json={"results": [{"uid": "file-9"}]})
        )
        source = ThreadRecordingFile(b"large image")

        async with Puter(api_key="tok") as client:
            await client.fs.upload(source, "/", name="big.png")

        assert source.read_thread is not None
        assert source.read_thread != threading.get_ident()
        assert b"large image" in route.calls.last.request.content

    @pytest.mark.asyncio
    async def test_upload_bytes_need_name(self):
        """Test raw bytes without a name are rejected."""
        client = Puter(api_key="tok")

        with pytest.raises(ValidationError):
            await client.fs.upload(b"data", "/testuser")

    @pytest.mark.asyncio
    async def test_upload_missing_file(self, tmp_path):
        """Test a local path that doesn't exist."""
        client = Puter(api_key="tok")

        with pytest.raises(ValidationError, match="File not found"):
            await client.fs.upload(tmp_path / "nope.txt", "/testuser")

    @pytest.mark.asyncio
    async def test_upload_rejected(self, respx_mock, api_base_url):
        """Test an error reported in the batch results."""
        respx_mock.post(f"{api_base_url}/batch").mock(
            return_value=Response(
                200,
                json={"results": [{"error": {"code": "storage_limit", "message": "Full"}}]},
            )
        )

        async with Puter(api_key="tok") as client:
            with pytest.raises(BackendError) as exc_info:
                await client.fs.upload(b"data", "/testuser", name="a.bin")

        assert exc_info.value.code == "storage_limit"
        assert exc_info.value.message == "Full"
