import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Iterable
from knowledge_base.files.deleter import SafeFileDeleter
from knowledge_base.files.names import referenced_filenames

logger = logging.getLogger(__name__)


@dataclass
class OrphanScanResult:
    total_files: int
    used_files: int
    unused_files: int
    unused_files_list: list[str]
    used_files_list: list[str]

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class BulkDeleteReport:
    results: list[dict] = field(default_factory=list)
    deleted: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict:
        return {"results": self.results, "total": self.total, "deleted": self.deleted, "failed": self.failed}


class OrphanScanner:
    """Finds upload files that no article references any more."""

    def __init__(self, uploads_root: str | os.PathLike, deleter: SafeFileDeleter | None = None):
        self.uploads_root = Path(uploads_root)
        self.deleter = deleter or SafeFileDeleter(self.uploads_root)

    def list_upload_files(self) -> list[str]:
        if not self.uploads_root.is_dir():
            return []
        return sorted(p.name for p in self.uploads_root.iterdir() if p.is_file())

    def scan(self, articles: Iterable, present: Iterable[str] | None = None) -> OrphanScanResult:
        files = sorted(set(present)) if present is not None else self.list_upload_files()

        used: set[str] = set()
        for article in articles:
            used |= referenced_filenames(article)

        used_list = [f for f in files if f in used]
        unused_list = [f for f in files if f not in used]
        logger.info("Orphan scan: %d files, %d used, %d unused", len(files), len(used_list), len(unused_list))
        return OrphanScanResult(
            total_files=len(files),
            used_files=len(used_list),
            unused_files=len(unused_list),
            unused_files_list=unused_list,
            used_files_list=used_list,
        )

    def delete_files(self, filenames: Iterable[str]) -> BulkDeleteReport:
        report = BulkDeleteReport()
        for name in filenames:
            result = self.deleter.delete_name(name)
            report.results.append(result.to_dict())
            if result.success:
                report.deleted += 1
            else:
                report.failed += 1
        return report
