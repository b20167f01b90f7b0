import json
import re
from collections.abc import Generator
from pathlib import Path
from typing import Any

import httpx
import pytest

from tests.factories import make_settings
from slideshow_processor.backend.client import BackendClient
from slideshow_processor.config.settings import Settings
from slideshow_processor.processor.processor import build_processor
from slideshow_processor.storage.local_adapter import LocalBlobStorage
from slideshow_processor.worker.source_runner import SourceRunner
from slideshow_processor.worker.worker import ShardWorker

_START = re.compile(r"^/api/processing/(?P<id>[^/]+)/start$")
_CHECK = re.compile(r"^/api/processing/check-hash/(?P<fp>[0-9a-f]+)$")
_TERMINAL = re.compile(r"^/api/processing/(?P<id>[^/]+)/failed$")
_TRANSIENT = re.compile(r"^/api/images/(?P<id>[^/]+)/failed$")


class FakeBackend:
    """In-memory backend of record served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.sources: list[dict[str, Any]] = []
        self.devices: list[dict[str, Any]] = []
        self.known_fingerprints: set[str] = set()
        self.started: list[tuple[str, int]] = []
        self.finalized: list[dict[str, Any]] = []
        self.terminal_failures: list[tuple[str, dict[str, Any]]] = []
        self.transient_failures: list[tuple[str, dict[str, Any]]] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else None

        if request.method == "GET" and path == "/api/processing/staged":
            limit = int(request.url.params["limit"])
            return httpx.Response(200, json={"sources": self.sources[:limit]})
        if request.method == "GET" and path == "/api/processing/device-dimensions":
            return httpx.Response(200, json={"devices": self.devices})
        if request.method == "GET" and (match := _CHECK.match(path)):
            return httpx.Response(
                200, json={"exists": match["fp"] in self.known_fingerprints}
            )
        if request.method == "POST" and (match := _START.match(path)):
            self.started.append((match["id"], body["attempt"]))
            return httpx.Response(200, json={"attempt": body["attempt"]})
        if request.method == "POST" and path == "/api/processing/finalize":
            self.finalized.append(body)
            return httpx.Response(204)
        if request.method == "POST" and (match := _TERMINAL.match(path)):
            self.terminal_failures.append((match["id"], body))
            return httpx.Response(204)
        if request.method == "PATCH" and (match := _TRANSIENT.match(path)):
            self.transient_failures.append((match["id"], body))
            return httpx.Response(204)
        return httpx.Response(404, json={"error": f"no route for {request.method} {path}"})


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    return tmp_path / "storage"


@pytest.fixture
def integration_settings(storage_root: Path) -> Settings:
    return make_settings(storage_backend="local", storage_local_root=str(storage_root))


@pytest.fixture
def backend_client(
    fake_backend: FakeBackend, integration_settings: Settings
) -> Generator[BackendClient, None, None]:
    http_client = httpx.Client(
        base_url=integration_settings.backend_api_url,
        transport=httpx.MockTransport(fake_backend.handle),
    )
    with BackendClient(http_client=http_client) as client:
        yield client


@pytest.fixture
def make_worker(
    integration_settings: Settings,
    storage_root: Path,
    backend_client: BackendClient,
):
    """Build a ShardWorker wired to local storage and the fake backend."""

    def _make(**overrides: object) -> ShardWorker:
        settings = (
            integration_settings.model_copy(update=overrides)
            if overrides
            else integration_settings
        )
        storage = LocalBlobStorage(storage_root, settings.bucket_name)
        processor = build_processor(settings, storage, backend_client)
        runner = SourceRunner(processor, backend_client, settings)
        return ShardWorker(backend_client, runner, settings)

    return _make
