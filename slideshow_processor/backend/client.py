from types import TracebackType
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from slideshow_processor.backend.exceptions import (
    BackendNetworkError,
    BackendResponseError,
    BackendSchemaError,
)
from slideshow_processor.backend.schemas import (
    CheckHashResponse,
    DeviceDimensionsResponse,
    FinalizeRequest,
    StagedSourcesResponse,
    StartAttemptRequest,
    StartAttemptResponse,
    TerminalFailureRequest,
    TransientFailureRequest,
)
from slideshow_processor.config.settings import Settings
from slideshow_processor.layout.models import DeviceGeometry

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)


class BackendClient:
    """HTTP client for the backend of record.

    All cross-instance coordination goes through these calls; the client
    itself holds no state besides the connection pool.
    """

    def __init__(
        self,
        *,
        http_client: httpx.Client,
        processing_prefix: str = "/api/processing",
        images_prefix: str = "/api/images",
    ) -> None:
        self._http = http_client
        self._processing = processing_prefix.rstrip("/")
        self._images = images_prefix.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "BackendClient":
        http_client = httpx.Client(
            base_url=settings.backend_api_url,
            timeout=settings.backend_timeout_seconds,
        )
        return cls(
            http_client=http_client,
            processing_prefix=settings.backend_processing_prefix,
            images_prefix=settings.backend_images_prefix,
        )

    def __enter__(self) -> "BackendClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def blob_exists(self, fingerprint: str) -> bool:
        response = self._request("GET", f"{self._processing}/check-hash/{fingerprint}")
        return self._parse(response, CheckHashResponse).exists

    def fetch_staged(self, limit: int) -> list[Any]:
        """Staged records in batch order, unvalidated."""
        response = self._request(
            "GET", f"{self._processing}/staged", params={"limit": limit}
        )
        return self._parse(response, StagedSourcesResponse).sources

    def fetch_device_dimensions(self) -> list[DeviceGeometry]:
        response = self._request("GET", f"{self._processing}/device-dimensions")
        return self._parse(response, DeviceDimensionsResponse).devices

    def register_attempt(self, source_id: str, attempt: int) -> StartAttemptResponse:
        response = self._request(
            "POST",
            f"{self._processing}/{source_id}/start",
            body=StartAttemptRequest(attempt=attempt),
        )
        return self._parse(response, StartAttemptResponse)

    def finalize(self, request: FinalizeRequest) -> None:
        self._request("POST", f"{self._processing}/finalize", body=request)

    def report_terminal_failure(
        self, source_id: str, error_message: str, attempt_count: int
    ) -> None:
        self._request(
            "POST",
            f"{self._processing}/{source_id}/failed",
            body=TerminalFailureRequest(
                error_message=error_message, attempt_count=attempt_count
            ),
        )

    def report_transient_failure(self, source_id: str, error: str, attempt: int) -> None:
        self._request(
            "PATCH",
            f"{self._images}/{source_id}/failed",
            body=TransientFailureRequest(error=error, attempt=attempt),
        )

    def _request(
        self,
        method: str,
        path: str,
        *,
        body: BaseModel | None = None,
        params: dict[str, int] | None = None,
    ) -> httpx.Response:
        try:
            response = self._http.request(
                method,
                path,
                json=body.model_dump(mode="json") if body is not None else None,
                params=params,
            )
        except httpx.TransportError as exc:
            raise BackendNetworkError(f"{method} {path} network error: {exc}") from exc

        if response.is_error:
            raise BackendResponseError(
                f"{method} {path} failed: {response.status_code} {response.text}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _parse(response: httpx.Response, model: type[ResponseModel]) -> ResponseModel:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as exc:
            raise BackendSchemaError(
                f"Unexpected {model.__name__} body from {response.request.url}: {exc}"
            ) from exc
