# intake/asset_store.py
import os, re, time, itertools, logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from intake.errors import AssetWriteError

logger = logging.getLogger(__name__)

_RE_UNSAFE = re.compile(r'[^A-Za-z0-9._-]+')
_MAX_STEM = 80
_MAX_NAME_ATTEMPTS = 5

# process-wide; next() on itertools.count is atomic under the GIL
_SEQ = itertools.count(1)


@dataclass(frozen=True)
class UploadedBlob:
    field_name: str
    original_name: str
    content: bytes
    content_type: Optional[str] = None


@dataclass(frozen=True)
class AssetReference:
    field_name: str
    original_name: str
    stored_name: str
    size_bytes: int
    relative_path: str


def safe_segment(original_name: str) -> str:
    """Reduce a client supplied filename to something usable as a URL path segment."""
    base = os.path.basename((original_name or "").replace("\\", "/"))
    stem, ext = os.path.splitext(base)
    stem = _RE_UNSAFE.sub("_", stem).strip("._")[:_MAX_STEM]
    ext = _RE_UNSAFE.sub("", ext)[:16]
    if not stem:
        stem = "file"
    return f"{stem}{ext}"


class AssetStore:
    """
    Writes uploaded blobs into a single content directory.

    Stored names are <time_ns>-<seq>-<safe original name>. The sequence is
    process-wide and files are created exclusively, so a clash with another
    process only costs a retry.
    """
    def __init__(self, root: str, url_prefix: str = "/uploads"):
        self.root = root
        self.url_prefix = url_prefix.rstrip("/")

    def _ensure_root(self):
        try:
            os.makedirs(self.root, exist_ok=True)
        except OSError as exc:
            raise AssetWriteError(f"upload directory is not writable: {exc.strerror or exc}") from exc

    def _next_name(self, blob: UploadedBlob) -> str:
        return f"{time.time_ns()}-{next(_SEQ)}-{safe_segment(blob.original_name or blob.field_name)}"

    def path_for(self, stored_name: str) -> str:
        return os.path.join(self.root, stored_name)

    def url_for(self, stored_name: str) -> str:
        return f"{self.url_prefix}/{stored_name}"

    def _discard(self, path: str):
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("could not remove partial asset %s", path)

    def store(self, blob: UploadedBlob) -> AssetReference:
        self._ensure_root()
        for _ in range(_MAX_NAME_ATTEMPTS):
            stored_name = self._next_name(blob)
            path = self.path_for(stored_name)
            try:
                f = open(path, "xb")
            except FileExistsError:
                continue
            except OSError as exc:
                raise AssetWriteError(f"cannot create {stored_name}: {exc.strerror or exc}") from exc
            try:
                with f:
                    f.write(blob.content)
            except OSError as exc:
                self._discard(path)
                raise AssetWriteError(f"cannot write {stored_name}: {exc.strerror or exc}") from exc
            logger.debug("stored %s (%d bytes) as %s", blob.original_name, len(blob.content), stored_name)
            return AssetReference(
                field_name=blob.field_name,
                original_name=blob.original_name,
                stored_name=stored_name,
                size_bytes=len(blob.content),
                relative_path=self.url_for(stored_name),
            )
        raise AssetWriteError(f"could not allocate a unique name for {blob.original_name}")

    def store_many(self, blobs: Sequence[UploadedBlob]) -> List[AssetReference]:
        """Store every blob in order; on any failure remove what this call wrote and re-raise."""
        refs = []
        try:
            for blob in blobs:
                refs.append(self.store(blob))
        except AssetWriteError:
            for ref in refs:
                self._discard(self.path_for(ref.stored_name))
            raise
        return refs
