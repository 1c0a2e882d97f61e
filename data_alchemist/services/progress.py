from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from tqdm import tqdm

"""Step progress for multi-file loads and exports (tqdm, TTY only).

Each loaded dataset or written artifact is one step. Off a TTY (CI, pipes)
the bar is created disabled so no control sequences reach the output.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Usage:

        with ProgressTracker(3, label="Loading") as progress:
            for kind, path in paths.items():
                with progress.step(path.name):
                    ...
    """

    def __init__(self, total: int, *, label: str) -> None:
        self.label = label
        self.completed: list[str] = []
        self.enabled = is_tty_enabled()
        self.pbar: Any = tqdm(
            total=total,
            desc=label,
            unit="step",
            disable=not self.enabled,
            leave=True,
            ncols=80,
            ascii=True,
        )

    @contextmanager
    def step(self, name: str) -> Iterator[None]:
        """Show name while the block runs; count the step only if it succeeds."""
        self.pbar.set_description(f"{self.label} ({name})")
        yield
        self.completed.append(name)
        self.pbar.update(1)
        self.pbar.set_description(self.label)

    def note(self, **stats: Any) -> None:
        self.pbar.set_postfix(**stats)

    def close(self) -> None:
        self.pbar.close()

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
