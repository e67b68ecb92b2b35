"""Shared pytest fixtures for all tests."""

import io

import pytest
from PIL import Image

from common.exceptions import BackendFailureError
from datastore.durable_backend import DurableBackend
from datastore.file_blob_store import FileBlobStore
from datastore.memory_backend import MemoryBackend
from fragments.service import FragmentService


class FlakyBlobStore:
    """
    In-memory blob store whose writes, reads and deletes can be made to fail.

    Used to drive the failure paths of DurableBackend.
    """

    def __init__(self):
        self.blobs = {}
        self.fail_writes = False
        self.fail_reads = False
        self.fail_deletes = False
        self.delete_calls = []
        self.closed = False

    async def write(self, owner_id, fragment_id, data):
        if self.fail_writes:
            raise BackendFailureError("blob store unavailable")
        self.blobs[(owner_id, fragment_id)] = bytes(data)

    async def read(self, owner_id, fragment_id):
        if self.fail_reads:
            raise BackendFailureError("blob store unavailable")
        return self.blobs.get((owner_id, fragment_id))

    async def delete(self, owner_id, fragment_id):
        self.delete_calls.append((owner_id, fragment_id))
        if self.fail_deletes:
            raise BackendFailureError("blob store unavailable")
        return self.blobs.pop((owner_id, fragment_id), None) is not None

    async def aclose(self):
        self.closed = True


@pytest.fixture
def memory_backend():
    """
    Fresh volatile backend per test.
    """
    return MemoryBackend()


@pytest.fixture
def db_path(tmp_path):
    """
    Path of a per-test SQLite metadata index.
    """
    return str(tmp_path / "index" / "fragments.db")


@pytest.fixture
def blob_root(tmp_path):
    return tmp_path / "blobs"


@pytest.fixture
def durable_backend(db_path, blob_root):
    """
    Durable backend over a temporary SQLite index and filesystem blob store.
    """
    return DurableBackend.open(db_path, FileBlobStore(str(blob_root)))


@pytest.fixture
def flaky_blob_store():
    return FlakyBlobStore()


@pytest.fixture
def flaky_backend(db_path, flaky_blob_store):
    """
    Durable backend whose blob deletes can be switched to fail.
    """
    return DurableBackend.open(db_path, flaky_blob_store)


@pytest.fixture(params=["memory", "durable"])
def backend(request, tmp_path):
    """
    Each backend strategy in turn; tests using it run once per strategy.
    """
    if request.param == "memory":
        return MemoryBackend()
    return DurableBackend.open(
        str(tmp_path / "fragments.db"),
        FileBlobStore(str(tmp_path / "blobs")),
    )


@pytest.fixture
def service(backend):
    return FragmentService(backend)


@pytest.fixture
def png_bytes():
    """
    Small RGBA PNG generated with Pillow.
    """
    image = Image.new("RGBA", (4, 3), (255, 0, 0, 128))
    output = io.BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()
