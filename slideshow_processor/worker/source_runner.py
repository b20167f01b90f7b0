from typing import Any

from pydantic import ValidationError

from slideshow_processor.backend.client import BackendClient
from slideshow_processor.backend.exceptions import BackendError
from slideshow_processor.backend.schemas import Source
from slideshow_processor.config.settings import Settings
from slideshow_processor.layout.models import DeviceGeometry
from slideshow_processor.logging.logger import Log
from slideshow_processor.processor.finalize_payload import FinalizePayloadBuilder
from slideshow_processor.processor.models import ProcessingStatus
from slideshow_processor.processor.processor import Processor
from slideshow_processor.worker.models import SourceOutcome


def _recover_id(record: Any) -> str | None:
    """Best-effort id of a staged record that failed validation."""
    if not isinstance(record, dict):
        return None
    source_id = record.get("id")
    if isinstance(source_id, (str, int)) and not isinstance(source_id, bool):
        return str(source_id) or None
    return None


def _describe(exc: ValidationError) -> str:
    fields = "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'record'}: {error['msg']}"
        for error in exc.errors()
    )
    return f"Malformed staged source ({fields})"


class SourceRunner:
    """Run one source through register -> process -> finalize, with retry reporting."""

    def __init__(
        self,
        processor: Processor,
        backend: BackendClient,
        settings: Settings,
        payload_builder: FinalizePayloadBuilder | None = None,
    ) -> None:
        self._processor = processor
        self._backend = backend
        self._settings = settings
        self._payload_builder = payload_builder or FinalizePayloadBuilder()

    def run_staged(
        self,
        record: Any,
        attempt: int,
        fallback_devices: list[DeviceGeometry],
    ) -> SourceOutcome:
        """Validate a raw staged record, then run it; never raises.

        A malformed record is reported like any other source failure when its
        id is readable, and skipped with an error log otherwise.
        """
        try:
            source = Source.model_validate(record)
        except ValidationError as exc:
            message = _describe(exc)
            source_id = _recover_id(record)
            if source_id is None:
                Log.error(f"Skipping staged record without a usable id: {message}")
                return SourceOutcome.SKIPPED
            Log.error(f"Source {source_id} failed: {message}")
            return self._report_failure(source_id, attempt, message)
        return self.run(source, attempt, fallback_devices)

    def run(
        self,
        source: Source,
        attempt: int,
        fallback_devices: list[DeviceGeometry],
    ) -> SourceOutcome:
        """Process a single source; never raises."""
        Log.info(
            f"Running source {source.id} "
            f"(attempt {attempt}/{self._settings.max_attempts})"
        )
        try:
            start = self._backend.register_attempt(source.id, attempt)
            devices = start.devices if start.devices is not None else fallback_devices
            Log.info(f"Source {source.id} targets {len(devices)} device(s)")

            result = self._processor.process(source, devices)
            self._backend.finalize(self._payload_builder.build(source.id, result))
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            Log.error(f"Source {source.id} failed: {message}")
            return self._report_failure(source.id, attempt, message)

        if result.status is ProcessingStatus.DUPLICATE:
            Log.info(f"Source {source.id} linked to existing blob {result.fingerprint}")
            return SourceOutcome.DUPLICATE
        Log.info(
            f"Source {source.id} completed with {len(result.variants)} variant(s)"
        )
        return SourceOutcome.PROCESSED

    def _report_failure(self, source_id: str, attempt: int, message: str) -> SourceOutcome:
        """Report terminal failure once attempts are exhausted, otherwise ask for a retry."""
        if attempt >= self._settings.max_attempts:
            Log.error(
                f"Source {source_id} permanently failed after {attempt} attempts"
            )
            try:
                self._backend.report_terminal_failure(source_id, message, attempt)
            except BackendError as report_exc:
                Log.error(f"Failed to report terminal failure for {source_id}: {report_exc}")
            return SourceOutcome.FAILED_TERMINAL

        Log.warning(f"Source {source_id} will be retried (attempt {attempt})")
        try:
            self._backend.report_transient_failure(source_id, message, attempt)
        except BackendError as report_exc:
            Log.error(f"Failed to report transient failure for {source_id}: {report_exc}")
        return SourceOutcome.RETRY_SCHEDULED
