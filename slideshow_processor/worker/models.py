from dataclasses import dataclass
from enum import Enum


class SourceOutcome(str, Enum):
    PROCESSED = "processed"
    DUPLICATE = "duplicate"
    RETRY_SCHEDULED = "retry_scheduled"
    FAILED_TERMINAL = "failed_terminal"
    SKIPPED = "skipped"


@dataclass
class ShardReport:
    """Per-outcome tallies of one shard run."""

    total: int = 0
    processed: int = 0
    duplicates: int = 0
    retry_scheduled: int = 0
    failed_terminal: int = 0
    skipped: int = 0

    def record(self, outcome: SourceOutcome) -> None:
        self.total += 1
        if outcome is SourceOutcome.PROCESSED:
            self.processed += 1
        elif outcome is SourceOutcome.DUPLICATE:
            self.duplicates += 1
        elif outcome is SourceOutcome.RETRY_SCHEDULED:
            self.retry_scheduled += 1
        elif outcome is SourceOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.failed_terminal += 1

    @property
    def exit_code(self) -> int:
        return 1 if self.failed_terminal else 0
