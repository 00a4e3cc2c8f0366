"""
reportproc/watch.py

Folder discovery for the processor: the files already waiting in the input
folder, and the files that arrive afterwards.

Responsibilities
----------------
- List the files present at startup (`iter_existing`).
- Poll the folder for newly created files matching a glob and yield each
  one once it is ready (`FolderWatch`).

Conventions
-----------
- A new file is "ready" when its size is the same on two consecutive polls,
  so a file still being copied in is not handed over half-written.
- Without a seed, files present when a watch starts are part of its
  baseline and are never yielded by that watch; `iter_existing` covers
  them.
- With a seed (`seen`), only the seeded paths form the baseline. Anything
  else already in the folder on the first poll is treated as new, so a
  file that lands between the startup scan and the first poll is not lost.
- Each `iter(FolderWatch(...))` starts over from the seed, or from a
  fresh snapshot when there is none.

Notes
-----
- Polling is used instead of OS notifications so the same code runs on any
  platform and in tests with nothing more than `tmp_path`.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Iterator
from pathlib import Path

LOGGER = logging.getLogger(__name__)


def iter_existing(folder: str | Path) -> Iterator[Path]:
    """Yield every regular file in `folder`, sorted by name."""
    for path in sorted(Path(folder).iterdir()):
        if path.is_file():
            yield path


def _snapshot(folder: Path, pattern: str) -> dict[Path, int]:
    """Map each matching file to its current size."""
    sizes = {}
    for path in folder.glob(pattern):
        try:
            if path.is_file():
                sizes[path] = path.stat().st_size
        except FileNotFoundError:
            # Removed between glob and stat.
            continue
    return sizes


class FolderWatch:
    """Iterable of new, fully written files appearing in a folder.

    Args:
        folder: Folder to watch.
        pattern: Glob matched against file names (e.g. "*.xml").
        poll_interval: Seconds to sleep between polls.
        max_polls: Stop after this many polls; None polls forever.
        seen: Paths already handled elsewhere (e.g. by the startup scan).
            When given, they replace the initial folder snapshot as the
            baseline.
    """

    def __init__(
        self,
        folder: str | Path,
        pattern: str = "*.xml",
        poll_interval: float = 1.0,
        max_polls: int | None = None,
        seen: Iterable[Path] | None = None,
    ):
        self.folder = Path(folder)
        self.pattern = pattern
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self.seen = None if seen is None else frozenset(Path(p) for p in seen)

    def __iter__(self) -> Iterator[Path]:
        if self.seen is None:
            baseline = set(_snapshot(self.folder, self.pattern))
        else:
            baseline = set(self.seen)
        pending: dict[Path, int] = {}
        polls = 0

        while self.max_polls is None or polls < self.max_polls:
            time.sleep(self.poll_interval)
            polls += 1

            current = _snapshot(self.folder, self.pattern)
            # Files that disappear are forgotten, so a later file with the
            # same name counts as new again.
            baseline &= set(current)
            for path in list(pending):
                if path not in current:
                    del pending[path]

            for path, size in sorted(current.items()):
                if path in baseline:
                    continue
                if pending.get(path) == size:
                    del pending[path]
                    baseline.add(path)
                    LOGGER.info("New file detected: %s", path.name)
                    yield path
                else:
                    pending[path] = size
