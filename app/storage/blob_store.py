"""Local filesystem blob store"""

from pathlib import Path
from typing import List, Optional
import json
import logging

from app.config import settings

logger = logging.getLogger(__name__)

METADATA_SUFFIX = ".meta.json"


def build_blob_key(user_id: str, document_id: str, filename: str) -> str:
    """Storage key ``<userId>/<documentId>/<filename>``"""
    safe_name = Path(filename).name or "upload"
    return f"{user_id}/{document_id}/{safe_name}"


class LocalBlobStore:
    """Blob store keyed by relative path under a root directory"""

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or settings.BLOB_STORAGE_DIR).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise ValueError(f"Blob key escapes storage root: {key}")
        return path

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        path.with_name(path.name + METADATA_SUFFIX).write_text(json.dumps({"content_type": content_type}))
        logger.info(f"Stored blob {key} ({len(data)} bytes)")

    def get(self, key: str) -> bytes:
        """Raises ``FileNotFoundError`` for unknown keys"""
        return self._path(key).read_bytes()

    def delete(self, key: str) -> None:
        """Remove a blob; missing keys are ignored"""
        path = self._path(key)
        path.unlink(missing_ok=True)
        path.with_name(path.name + METADATA_SUFFIX).unlink(missing_ok=True)

        # Prune now-empty <user>/<document> directories
        for parent in (path.parent, path.parent.parent):
            if parent == self.root:
                break
            try:
                parent.rmdir()
            except OSError:
                break
        logger.info(f"Deleted blob {key}")

    def list_keys(self) -> List[str]:
        """Every stored blob key, sorted"""
        return sorted(
            path.relative_to(self.root).as_posix()
            for path in self.root.rglob("*")
            if path.is_file() and not path.name.endswith(METADATA_SUFFIX)
        )
