import logging
import os
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class DeleteResult:
    success: bool
    filename: str
    path: str
    message: str = ""
    deleted: bool = False
    size_bytes: int | None = None
    modified_at: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


class SafeFileDeleter:
    """Deletes single files, confined to the uploads root.

    Every outcome comes back as a DeleteResult; nothing is raised.
    """

    def __init__(self, uploads_root: str | os.PathLike):
        self.uploads_root = Path(uploads_root)

    def _is_inside_root(self, resolved: Path) -> bool:
        root = self.uploads_root.resolve()
        return resolved != root and resolved.is_relative_to(root)

    def delete(self, target: str | os.PathLike) -> DeleteResult:
        target = Path(target)
        filename = target.name
        try:
            resolved = target.resolve()
        except (OSError, RuntimeError) as e:
            return DeleteResult(False, filename, str(target), "Cannot resolve path", error=str(e))

        if not self._is_inside_root(resolved):
            logger.warning("Refusing to delete outside uploads root: %s", target)
            return DeleteResult(False, filename, str(target), "Path is outside the uploads directory")

        if not resolved.exists():
            return DeleteResult(True, filename, str(resolved), "File does not exist, nothing to delete")

        if not resolved.is_file():
            return DeleteResult(False, filename, str(resolved), "Not a regular file")

        try:
            st = resolved.stat()
            resolved.unlink()
        except OSError as e:
            logger.error("Failed to delete %s: %s", resolved, e)
            return DeleteResult(False, filename, str(resolved), "Delete failed", error=str(e))

        logger.info("Deleted upload %s (%d bytes)", resolved.name, st.st_size)
        return DeleteResult(
            True,
            resolved.name,
            str(resolved),
            "File deleted",
            deleted=True,
            size_bytes=st.st_size,
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc).isoformat(),
        )

    def delete_name(self, filename: str) -> DeleteResult:
        return self.delete(self.uploads_root / filename)
