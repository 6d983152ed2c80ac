import logging
import os
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from knowledge_base.files.deleter import SafeFileDeleter
from knowledge_base.files.names import referenced_filenames

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class CleanupReport:
    article_id: int | None
    deleted_files: list[dict] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)
    start_time: str = field(default_factory=_now_iso)
    end_time: str | None = None
    duration_ms: float | None = None

    @property
    def total_deleted(self) -> int:
        return len(self.deleted_files)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> dict:
        return {
            "article_id": self.article_id,
            "deleted_files": self.deleted_files,
            "errors": self.errors,
            "total_deleted": self.total_deleted,
            "has_errors": self.has_errors,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_ms": self.duration_ms,
        }


class ArticleFileCleaner:
    """Deletes the upload files an article references, best effort."""

    def __init__(self, uploads_root: str | os.PathLike, deleter: SafeFileDeleter | None = None):
        self.uploads_root = Path(uploads_root)
        self.deleter = deleter or SafeFileDeleter(self.uploads_root)

    def cleanup(self, article) -> CleanupReport:
        started = time.perf_counter()
        report = CleanupReport(article_id=getattr(article, "id", None))
        try:
            if article is None:
                raise ValueError("article is required")
            for filename in sorted(referenced_filenames(article)):
                self._delete_one(filename, report)
        except Exception as e:
            logger.exception("File cleanup failed for article %s", report.article_id)
            report.errors.append({"type": "critical", "error": str(e)})

        report.end_time = _now_iso()
        report.duration_ms = round((time.perf_counter() - started) * 1000, 3)
        logger.info(
            "Cleanup article=%s deleted=%d errors=%d in %.1fms",
            report.article_id,
            report.total_deleted,
            len(report.errors),
            report.duration_ms,
        )
        return report

    def _delete_one(self, filename: str, report: CleanupReport):
        try:
            result = self.deleter.delete(self.uploads_root / filename)
        except Exception as e:
            logger.exception("Unexpected error deleting %s", filename)
            report.errors.append({"type": "delete", "filename": filename, "error": str(e)})
            return
        if result.success:
            report.deleted_files.append(result.to_dict())
        else:
            report.errors.append({"type": "delete", "filename": filename, "error": result.error or result.message})
