import sys

from pydantic import ValidationError

from slideshow_processor.backend.client import BackendClient
from slideshow_processor.backend.exceptions import BackendError
from slideshow_processor.config.settings import Settings
from slideshow_processor.logging.logger import Log
from slideshow_processor.processor.processor import build_processor
from slideshow_processor.storage.factory import StorageFactory
from slideshow_processor.worker.source_runner import SourceRunner
from slideshow_processor.worker.worker import ShardWorker


def main() -> int:
    """Entry point: settings -> storage + backend -> shard worker. Returns the exit code."""
    try:
        settings = Settings()
    except ValidationError as exc:
        Log.configure("INFO")
        Log.error(f"Invalid configuration: {exc}")
        return 1

    Log.configure(settings.log_level, f"{settings.task_index}/{settings.task_count}")
    Log.info(
        f"Slideshow processor starting (attempt {settings.current_attempt}/"
        f"{settings.max_attempts})"
    )

    storage = StorageFactory.create(settings)
    with BackendClient.from_settings(settings) as backend:
        processor = build_processor(settings, storage, backend)
        source_runner = SourceRunner(processor, backend, settings)
        worker = ShardWorker(backend, source_runner, settings)
        try:
            report = worker.run()
        except BackendError as exc:
            Log.error(f"Shard run aborted: {exc}")
            return 1
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
