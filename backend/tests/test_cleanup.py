"""Tests for ArticleFileCleaner reports."""

from pathlib import Path

import pytest

from knowledge_base.files.cleanup import ArticleFileCleaner
from knowledge_base.files.deleter import DeleteResult, SafeFileDeleter

THREE_IMAGES = (
    '<p><img src="/api/uploads/image-1-1.png"></p>'
    '<p><img src="/api/uploads/image-2-2.png"></p>'
    '<p><img src="/api/uploads/image-3-3.png"></p>'
)


@pytest.fixture
def cleaner(uploads_dir):
    return ArticleFileCleaner(uploads_dir)


def test_deletes_content_and_field_references(cleaner, make_upload, article_factory):
    a = make_upload("image-1-1.png")
    b = make_upload("diagram.svg")
    keep = make_upload("unrelated.png")
    article = article_factory(
        article_id=7,
        content='<img src="/api/uploads/image-1-1.png">',
        images=[{"id": "i1", "filename": "diagram.svg"}],
    )

    report = cleaner.cleanup(article)

    assert report.article_id == 7
    assert report.total_deleted == 2
    assert report.has_errors is False
    assert sorted(d["filename"] for d in report.deleted_files) == ["diagram.svg", "image-1-1.png"]
    assert not a.exists() and not b.exists()
    assert keep.exists()


def test_best_effort_when_one_delete_fails(cleaner, make_upload, article_factory, monkeypatch):
    for name in ("image-1-1.png", "image-2-2.png", "image-3-3.png"):
        make_upload(name)
    original_unlink = Path.unlink

    def flaky_unlink(self, *args, **kwargs):
        if self.name == "image-2-2.png":
            raise OSError(5, "Input/output error")
        return original_unlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", flaky_unlink)
    report = cleaner.cleanup(article_factory(content=THREE_IMAGES))

    assert len(report.deleted_files) == 2
    assert len(report.errors) == 1
    assert report.errors[0]["filename"] == "image-2-2.png"
    assert "Input/output error" in report.errors[0]["error"]
    assert report.has_errors is True


def test_unexpected_deleter_exception_recorded(uploads_dir, article_factory):
    class ExplodingDeleter(SafeFileDeleter):
        def delete(self, target):
            if Path(target).name == "image-2-2.png":
                raise RuntimeError("boom")
            return DeleteResult(True, Path(target).name, str(target), "File deleted", deleted=True)

    cleaner = ArticleFileCleaner(uploads_dir, deleter=ExplodingDeleter(uploads_dir))
    report = cleaner.cleanup(article_factory(content=THREE_IMAGES))

    assert report.total_deleted == 2
    assert report.errors == [{"type": "delete", "filename": "image-2-2.png", "error": "boom"}]


def test_missing_files_count_as_success(cleaner, article_factory):
    report = cleaner.cleanup(article_factory(content=THREE_IMAGES))
    assert report.total_deleted == 3
    assert all(d["deleted"] is False for d in report.deleted_files)
    assert report.has_errors is False


def test_none_article_is_critical_error(cleaner):
    report = cleaner.cleanup(None)
    assert report.article_id is None
    assert report.total_deleted == 0
    assert len(report.errors) == 1
    assert report.errors[0]["type"] == "critical"


def test_report_timing_and_dict(cleaner, article_factory):
    report = cleaner.cleanup(article_factory(article_id=3))
    data = report.to_dict()
    assert data["article_id"] == 3
    assert data["total_deleted"] == 0
    assert data["has_errors"] is False
    assert data["start_time"] <= data["end_time"]
    assert data["duration_ms"] >= 0


def test_field_reference_cannot_escape_root(cleaner, uploads_dir, article_factory):
    outside = uploads_dir.parent / "outside.png"
    outside.write_bytes(b"keep")
    article = article_factory(files=[{"id": "f", "path": "../outside.png"}])
    report = cleaner.cleanup(article)
    assert report.total_deleted == 0
    assert outside.exists()
