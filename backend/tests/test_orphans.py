"""Tests for OrphanScanner scan and bulk delete."""

import pytest

from knowledge_base.files.orphans import OrphanScanner


@pytest.fixture
def scanner(uploads_dir):
    return OrphanScanner(uploads_dir)


def test_scan_with_explicit_listing(scanner, article_factory):
    articles = [article_factory(content='<img src="/api/uploads/a.png">')]
    result = scanner.scan(articles, present=["a.png", "b.png", "c.png"])

    assert result.unused_files_list == ["b.png", "c.png"]
    assert result.used_files_list == ["a.png"]
    assert result.used_files == 1
    assert result.unused_files == 2
    assert result.total_files == 3


def test_scan_reads_directory(scanner, make_upload, uploads_dir, article_factory):
    make_upload("image-1-1.png")
    make_upload("image-2-2.png")
    make_upload("manual.pdf")
    (uploads_dir / "subdir").mkdir()
    articles = [
        article_factory(1, content='<img src="/uploads/image-1-1.png">'),
        article_factory(2, files=[{"id": "f", "name": "manual.pdf"}]),
    ]

    result = scanner.scan(articles)

    assert result.total_files == 3
    assert result.used_files_list == ["image-1-1.png", "manual.pdf"]
    assert result.unused_files_list == ["image-2-2.png"]


def test_references_to_absent_files_not_counted(scanner, article_factory):
    articles = [article_factory(content='<img src="/api/uploads/gone.png">')]
    result = scanner.scan(articles, present=[])
    assert result.used_files == 0
    assert result.total_files == 0


def test_missing_directory_lists_nothing(tmp_path):
    scanner = OrphanScanner(tmp_path / "does-not-exist")
    assert scanner.list_upload_files() == []
    assert scanner.scan([]).total_files == 0


def test_no_articles_means_everything_unused(scanner, make_upload):
    make_upload("x.png")
    result = scanner.scan([])
    assert result.unused_files_list == ["x.png"]


def test_bulk_delete_reports_per_file(scanner, make_upload, uploads_dir):
    make_upload("b.png")
    make_upload("c.png")
    outside = uploads_dir.parent / "keep.png"
    outside.write_bytes(b"keep")

    report = scanner.delete_files(["b.png", "c.png", "../keep.png", "never-existed.png"])
    data = report.to_dict()

    assert data["total"] == 4
    assert data["deleted"] == 3
    assert data["failed"] == 1
    assert [r["success"] for r in data["results"]] == [True, True, False, True]
    assert not (uploads_dir / "b.png").exists()
    assert outside.exists()


def test_record_with_odd_types_still_references_file(scanner, make_upload, article_factory):
    make_upload("image-1-2.png")
    articles = [article_factory(images=[{"id": 7, "name": 123, "filename": "image-1-2.png"}])]

    result = scanner.scan(articles)

    assert result.used_files_list == ["image-1-2.png"]
    assert result.unused_files_list == []
