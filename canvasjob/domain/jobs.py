# canvasjob/domain/jobs.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Union

from canvasjob.domain.geometry import ResizeSpec
from canvasjob.domain.text_layout import TextJob

RESIZE_KEY = "resize"


@dataclass(frozen=True)
class ResizeJob:
    spec: ResizeSpec

    @property
    def key(self) -> str:
        return RESIZE_KEY


@dataclass(frozen=True)
class WriteTextJob:
    text: TextJob

    @property
    def key(self) -> str:
        return self.text.key


Job = Union[ResizeJob, WriteTextJob]


class ChangeQueue:
    """
    Pending changes for one image, replayed lazily.

    Re-enqueueing an existing key swaps the payload but keeps the key where
    it was first inserted. `drain` only runs while the queue is dirty; the
    jobs stay queued afterwards so the next dirty cycle replays them all.
    """

    def __init__(self) -> None:
        self._jobs: Dict[str, Job] = {}
        self.dirty = False

    def enqueue(self, key: str, job: Job) -> None:
        self._jobs[key] = job

    def mark_dirty(self) -> None:
        self.dirty = True

    def drain(self, execute: Callable[[Job], None]) -> bool:
        """Run every job once, in order. Returns False when nothing was dirty."""
        if not self.dirty:
            return False
        for job in list(self._jobs.values()):
            execute(job)
        self.dirty = False
        return True

    def clear(self) -> None:
        self._jobs.clear()
        self.dirty = False

    @property
    def jobs(self) -> List[Job]:
        return list(self._jobs.values())

    def __len__(self) -> int:
        return len(self._jobs)

    def __iter__(self) -> Iterator[Job]:
        return iter(self.jobs)
