from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def shard(items: Sequence[T], task_index: int, task_count: int) -> list[T]:
    """Items whose batch position i satisfies i % task_count == task_index.

    Positional, not content-hashed: shards are disjoint only while every task
    instance fetched the batch in the same order.
    """
    if task_count < 1:
        raise ValueError(f"task_count must be positive, got {task_count}")
    if not 0 <= task_index < task_count:
        raise ValueError(f"task_index {task_index} out of range for {task_count} tasks")
    return [item for position, item in enumerate(items) if position % task_count == task_index]
