import json
from collections.abc import Callable

import httpx
import pytest

from slideshow_processor.backend.client import BackendClient
from slideshow_processor.backend.exceptions import (
    BackendNetworkError,
    BackendResponseError,
    BackendSchemaError,
)
from slideshow_processor.backend.schemas import FinalizeRequest, VariantPayload
from slideshow_processor.layout.models import LayoutType

Handler = Callable[[httpx.Request], httpx.Response]


def _make_client(handler: Handler) -> BackendClient:
    http_client = httpx.Client(
        base_url="http://backend.test",
        transport=httpx.MockTransport(handler),
    )
    return BackendClient(http_client=http_client)


def _recording(
    response: httpx.Response,
) -> tuple[Handler, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return response

    return handler, seen


class TestDedupCheck:
    def test_returns_exists_flag(self) -> None:
        handler, seen = _recording(httpx.Response(200, json={"exists": True}))
        client = _make_client(handler)

        assert client.blob_exists("abc") is True
        assert seen[0].method == "GET"
        assert seen[0].url.path == "/api/processing/check-hash/abc"

    def test_malformed_body_raises_schema_error(self) -> None:
        handler, _seen = _recording(httpx.Response(200, json={"found": True}))
        client = _make_client(handler)

        with pytest.raises(BackendSchemaError, match="CheckHashResponse"):
            client.blob_exists("abc")


class TestFetching:
    def test_fetch_staged_sends_limit(self) -> None:
        body = {
            "sources": [
                {"id": "s1", "staging_path": "gs://b/1.jpg", "origin": "upload"},
                {"id": "s2", "staging_path": "/tmp/2.jpg", "origin": "sync", "external_id": "x"},
            ]
        }
        handler, seen = _recording(httpx.Response(200, json=body))
        client = _make_client(handler)

        sources = client.fetch_staged(25)

        assert [s["id"] for s in sources] == ["s1", "s2"]
        assert sources[1]["external_id"] == "x"
        assert seen[0].url.path == "/api/processing/staged"
        assert seen[0].url.params["limit"] == "25"

    def test_fetch_staged_keeps_malformed_records_in_place(self) -> None:
        body = {
            "sources": [
                {"id": "s1", "staging_path": "gs://b/1.jpg", "origin": "upload"},
                {"id": "s2", "staging_path": "", "origin": "upload"},
                None,
                {"id": "s4", "staging_path": "gs://b/4.jpg", "origin": "upload"},
            ]
        }
        handler, _seen = _recording(httpx.Response(200, json=body))

        sources = _make_client(handler).fetch_staged(10)

        assert len(sources) == 4
        assert sources[1] == {"id": "s2", "staging_path": "", "origin": "upload"}
        assert sources[2] is None
        assert sources[3]["id"] == "s4"

    def test_fetch_staged_without_list_raises_schema_error(self) -> None:
        handler, _seen = _recording(httpx.Response(200, json={"sources": "nope"}))

        with pytest.raises(BackendSchemaError, match="StagedSourcesResponse"):
            _make_client(handler).fetch_staged(10)

    def test_fetch_device_dimensions(self) -> None:
        body = {
            "devices": [
                {
                    "width": 1920,
                    "height": 1080,
                    "orientation": "landscape",
                    "gap": 8,
                    "layouts": {"single": True, "paired": True},
                },
                {"width": 800, "height": 480},
            ]
        }
        handler, seen = _recording(httpx.Response(200, json=body))

        devices = _make_client(handler).fetch_device_dimensions()

        assert seen[0].url.path == "/api/processing/device-dimensions"
        assert devices[0].gap == 8
        assert devices[0].enabled_layouts() == [LayoutType.SINGLE, LayoutType.PAIRED]
        assert devices[1].gap == 0
        assert devices[1].enabled_layouts() == []


class TestAttemptLifecycle:
    def test_register_attempt_posts_attempt(self) -> None:
        handler, seen = _recording(
            httpx.Response(200, json={"attempt": 2, "devices": [{"width": 10, "height": 20}]})
        )

        response = _make_client(handler).register_attempt("s1", 2)

        assert seen[0].method == "POST"
        assert seen[0].url.path == "/api/processing/s1/start"
        assert json.loads(seen[0].content) == {"attempt": 2}
        assert response.devices is not None
        assert response.devices[0].height == 20

    def test_register_attempt_without_devices(self) -> None:
        handler, _seen = _recording(httpx.Response(200, json={"attempt": 1}))

        response = _make_client(handler).register_attempt("s1", 1)

        assert response.devices is None

    def test_finalize_posts_payload(self) -> None:
        handler, seen = _recording(httpx.Response(204))
        request = FinalizeRequest(
            source_id="s1",
            fingerprint="f" * 64,
            variants=[
                VariantPayload(
                    width=10,
                    height=20,
                    orientation="portrait",
                    layout_type="single",
                    storage_path="gs://b/k.jpg",
                    file_size=3,
                )
            ],
        )

        _make_client(handler).finalize(request)

        body = json.loads(seen[0].content)
        assert seen[0].url.path == "/api/processing/finalize"
        assert body["source_id"] == "s1"
        assert body["blob_data"] is None
        assert body["variants"][0]["layout_type"] == "single"

    def test_terminal_failure_payload(self) -> None:
        handler, seen = _recording(httpx.Response(200))

        _make_client(handler).report_terminal_failure("s1", "boom", 3)

        assert seen[0].method == "POST"
        assert seen[0].url.path == "/api/processing/s1/failed"
        assert json.loads(seen[0].content) == {"error_message": "boom", "attempt_count": 3}

    def test_transient_failure_payload(self) -> None:
        handler, seen = _recording(httpx.Response(200))

        _make_client(handler).report_transient_failure("s1", "boom", 1)

        assert seen[0].method == "PATCH"
        assert seen[0].url.path == "/api/images/s1/failed"
        assert json.loads(seen[0].content) == {"error": "boom", "attempt": 1}


class TestErrors:
    def test_non_2xx_raises_response_error(self) -> None:
        handler, _seen = _recording(httpx.Response(503, text="maintenance"))

        with pytest.raises(BackendResponseError, match="503") as exc_info:
            _make_client(handler).fetch_staged(1)

        assert exc_info.value.status_code == 503

    def test_transport_error_raises_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(BackendNetworkError, match="network error"):
            _make_client(handler).blob_exists("abc")

    def test_custom_prefixes(self) -> None:
        handler, seen = _recording(httpx.Response(200))
        http_client = httpx.Client(
            base_url="http://backend.test", transport=httpx.MockTransport(handler)
        )
        client = BackendClient(
            http_client=http_client, processing_prefix="/v2/proc/", images_prefix="/v2/img"
        )

        client.report_terminal_failure("s1", "x", 1)
        client.report_transient_failure("s1", "x", 1)

        assert [r.url.path for r in seen] == ["/v2/proc/s1/failed", "/v2/img/s1/failed"]
