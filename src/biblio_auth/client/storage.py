from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional, Union

from ..config.settings import ClientSettings
from ..domain.ports import SessionStorage

logger = logging.getLogger(__name__)


class InMemorySessionStorage(SessionStorage):
    """Token slot that lives as long as the process."""

    def __init__(self, token: Optional[str] = None) -> None:
        self._token = token

    def load(self) -> Optional[str]:
        return self._token

    def store(self, token: str) -> None:
        self._token = token

    def erase(self) -> None:
        self._token = None


class FileSessionStorage(SessionStorage):
    """
    Token slot persisted to a single file, readable only by its owner.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so a reader sees either the old token or the new
    one, never a partial write.
    """

    def __init__(self, path: Union[str, os.PathLike[str]]) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[str]:
        try:
            token = self._path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return token or None

    def store(self, token: str) -> None:
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".session-", text=True)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(token)
                os.chmod(tmp, 0o600)
                os.replace(tmp, self._path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise

    def erase(self) -> None:
        with self._lock:
            self._path.unlink(missing_ok=True)
        logger.debug("Session file removed", extra={"path": str(self._path)})


def storage_from_settings(settings: ClientSettings) -> SessionStorage:
    if settings.session_file:
        return FileSessionStorage(settings.session_file)
    return InMemorySessionStorage()
