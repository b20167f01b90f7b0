from slideshow_processor.backend.client import BackendClient
from slideshow_processor.config.settings import Settings
from slideshow_processor.logging.logger import Log
from slideshow_processor.worker.models import ShardReport
from slideshow_processor.worker.sharding import shard
from slideshow_processor.worker.source_runner import SourceRunner


class ShardWorker:
    """Fetch -> shard -> run each source of this task instance in order."""

    def __init__(
        self,
        backend: BackendClient,
        source_runner: SourceRunner,
        settings: Settings,
    ) -> None:
        self._backend = backend
        self._source_runner = source_runner
        self._settings = settings

    def run(self) -> ShardReport:
        """Process this instance's shard of the current staged batch.

        Batch-level fetch errors propagate; per-source errors never do.
        """
        settings = self._settings
        records = self._backend.fetch_staged(settings.staged_batch_limit)
        devices = self._backend.fetch_device_dimensions()
        mine = shard(records, settings.task_index, settings.task_count)
        Log.info(
            f"Fetched {len(records)} staged source(s) and {len(devices)} device(s); "
            f"{len(mine)} assigned to this shard"
        )

        attempt = settings.current_attempt
        report = ShardReport()
        for record in mine:
            outcome = self._source_runner.run_staged(record, attempt, devices)
            report.record(outcome)

        Log.info(
            f"Shard done: {report.processed} processed, {report.duplicates} duplicate(s), "
            f"{report.retry_scheduled} retry scheduled, {report.failed_terminal} failed, "
            f"{report.skipped} skipped"
        )
        return report
