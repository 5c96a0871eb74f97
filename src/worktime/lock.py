"""PID lock file that keeps a data file to a single recording process."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import psutil

logger = logging.getLogger(__name__)


class InstanceLockError(RuntimeError):
    """Another live process already records into the same data file."""

    def __init__(self, path: Path, pid: int) -> None:
        super().__init__(f"{path} is held by running process {pid}")
        self.path = path
        self.pid = pid


class InstanceLock:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._held = False

    def acquire(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        while True:
            try:
                fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                owner = self._read_owner()
                if owner is not None and owner != os.getpid() and psutil.pid_exists(owner):
                    raise InstanceLockError(self.path, owner) from None
                logger.info("Removing stale lock %s (pid %s).", self.path, owner)
                self.path.unlink(missing_ok=True)
                continue
            with os.fdopen(fd, "w") as handle:
                handle.write(str(os.getpid()))
            self._held = True
            logger.debug("Acquired %s.", self.path)
            return

    def release(self) -> None:
        if not self._held:
            return
        self._held = False
        if self._read_owner() == os.getpid():
            self.path.unlink(missing_ok=True)
            logger.debug("Released %s.", self.path)

    def _read_owner(self) -> Optional[int]:
        try:
            return int(self.path.read_text().strip())
        except (OSError, ValueError):
            return None

    def __enter__(self) -> "InstanceLock":
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()
