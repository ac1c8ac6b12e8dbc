# profiling/workspace.py
import pathlib
import shutil
import tempfile
from typing import Optional

from ..utils.logger import get_logger
from .errors import WorkspaceError

log = get_logger("Workspace")


class Workspace:
    """Temporary directory owned by exactly one profiling session.

    Use as a context manager, or call acquire()/release() directly when the
    directory has to outlive the block (the streamed binary artifact).
    release() may be called any number of times.
    """

    def __init__(self, prefix: str = "bcc-exporter-", base_dir: Optional[str] = None):
        self.prefix = prefix
        self.base_dir = base_dir
        self.path: Optional[pathlib.Path] = None

    def acquire(self) -> pathlib.Path:
        if self.path is not None:
            return self.path
        try:
            self.path = pathlib.Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.base_dir))
        except OSError as e:
            raise WorkspaceError(f"Failed to create temp directory: {e}")
        log.info(f"Acquired workspace {self.path}")
        return self.path

    def release(self) -> None:
        if self.path is None:
            return
        path, self.path = self.path, None
        shutil.rmtree(path, ignore_errors=True)
        log.info(f"Released workspace {path}")

    def __enter__(self) -> pathlib.Path:
        return self.acquire()

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
