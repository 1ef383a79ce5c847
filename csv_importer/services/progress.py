from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm

"""Per-row progress bar (tqdm), shown only on an interactive terminal.

When stdout is piped or captured the tracker still counts rows but draws
nothing, so log files never receive carriage returns or ANSI sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """True when stdout is attached to a terminal."""
    return sys.stdout.isatty()


class ProgressTracker:
    """Counts processed rows of one import; draws a bar on a TTY.

    Usage::

        with ProgressTracker(len(rows)) as progress:
            for row in rows:
                ...
                progress.advance(created=3, failed=0)
    """

    def __init__(self, total_rows: int, *, description: str = "Importing rows") -> None:
        self.total_rows = total_rows
        self.description = description
        self.current_row = 0
        self.enabled = is_tty_enabled()
        self.bar: Any = self._open_bar() if self.enabled else None

    def _open_bar(self) -> Any:
        return tqdm(
            total=self.total_rows,
            desc=self.description,
            unit="row",
            disable=False,
            leave=True,
            position=0,
            ncols=80,
            ascii=True,
        )

    def advance(self, **postfix: Any) -> None:
        """Count one row; ``postfix`` counters are shown after the bar."""
        self.current_row += 1
        if self.bar is None:
            return
        self.bar.update(1)
        if postfix:
            self.bar.set_postfix(**postfix)

    def close(self) -> None:
        if self.bar is not None:
            self.bar.close()
            self.bar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
