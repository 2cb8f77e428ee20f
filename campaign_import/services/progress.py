from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Submit progress display with tqdm (TTY only).

Progress is stage based rather than byte based:
- 0   submit started
- 10  batch built
- 10..90 advanced per page written by the persistence collaborator
- 100 committed

In non-TTY environments (CI, redirected output) no bar is drawn; the current
percentage is still tracked and reported to the optional listener.
"""

__all__ = [
    "SubmitProgress",
    "is_tty_enabled",
    "BATCH_BUILT_PERCENT",
    "WRITE_CEILING_PERCENT",
]

BATCH_BUILT_PERCENT = 10
WRITE_CEILING_PERCENT = 90


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class SubmitProgress:
    """Percentage progress for one submit."""

    def __init__(
        self,
        *,
        description: str = "Uploading",
        listener: Callable[[int], None] | None = None,
    ) -> None:
        self.description = description
        self.listener = listener
        self.percent = 0
        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None = None

    def _ensure_bar(self) -> None:
        if self.enabled and self.pbar is None:
            self.pbar = tqdm(
                total=100,
                desc=self.description,
                unit="%",
                leave=False,
                ncols=80,
                ascii=True,
            )

    def advance_to(self, percent: int) -> None:
        """Move forward to `percent` (clamped to 0..100, never backwards)."""
        target = max(0, min(100, int(percent)))
        if target <= self.percent:
            return
        self._ensure_bar()
        if self.pbar is not None:
            self.pbar.update(target - self.percent)
        self.percent = target
        if self.listener is not None:
            self.listener(self.percent)

    def advance_pages(self, written_rows: int, total_rows: int) -> None:
        """Map written rows onto the 10..90 window."""
        if total_rows <= 0:
            return
        span = WRITE_CEILING_PERCENT - BATCH_BUILT_PERCENT
        self.advance_to(BATCH_BUILT_PERCENT + span * min(written_rows, total_rows) // total_rows)

    def complete(self) -> None:
        self.advance_to(100)
        self.close()

    def reset(self) -> None:
        self.close()
        self.percent = 0
        if self.listener is not None:
            self.listener(0)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> SubmitProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
