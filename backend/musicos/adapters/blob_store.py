import logging
import os
import tempfile
from pathlib import Path

from filelock import FileLock, Timeout

log = logging.getLogger("blob_store")


class BlobStoreError(Exception):
    pass


class LocalBlobStore:
    """
    Filesystem blob store.
    put(path, data) returns a ref (the relative path); get_download_url(ref)
    maps it under the public base URL the uploads directory is served from.
    """

    def __init__(self, root: str, public_url: str, lock_timeout: float = 10):
        self.root = Path(root).resolve()
        self.public_url = public_url.rstrip("/")
        self.lock_timeout = lock_timeout
        self.locks_dir = os.path.join(tempfile.gettempdir(), "musicos_locks")

    def _target(self, ref: str) -> Path:
        target = (self.root / ref).resolve()
        if self.root not in target.parents:
            raise BlobStoreError(f"Path escapes storage root: {ref}")
        return target

    def put(self, path: str, data: bytes, content_type: str = None) -> str:
        target = self._target(path)
        os.makedirs(self.locks_dir, exist_ok=True)
        lock = FileLock(os.path.join(self.locks_dir, target.name + ".lock"))
        try:
            with lock.acquire(timeout=self.lock_timeout):
                target.parent.mkdir(parents=True, exist_ok=True)
                tmp = target.with_name(target.name + ".part")
                tmp.write_bytes(data)
                os.replace(tmp, target)
        except Timeout:
            raise BlobStoreError(f"Could not acquire storage lock for {path}")
        except OSError as e:
            raise BlobStoreError(f"Could not store {path}: {e}") from e
        log.debug("stored %s (%d bytes, %s)", path, len(data), content_type)
        return path

    def get_download_url(self, ref: str) -> str:
        self._target(ref)
        return f"{self.public_url}/{ref}"

    def health_check(self) -> bool:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            return os.access(self.root, os.W_OK)
        except OSError:
            return False
