from pathlib import Path
from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from knowledge_base.db.session import get_db
from knowledge_base.core.audit import audit
from knowledge_base.core.errors import not_found
from knowledge_base.core.rbac import require_admin
from knowledge_base.core.response import ok
from knowledge_base.core.storage import content_type_for
from knowledge_base.api.deps import get_file_deleter, get_orphan_scanner, get_uploads_root
from knowledge_base.files.deleter import SafeFileDeleter
from knowledge_base.files.names import is_valid_filename
from knowledge_base.files.orphans import OrphanScanner
from knowledge_base.models.article import Article
from knowledge_base.models.user import User
from knowledge_base.schemas.article import OrphanDeleteIn

router = APIRouter(prefix="/api/uploads", tags=["uploads"])
public_router = APIRouter(tags=["uploads"])


@router.get("/orphans")
def scan_orphans(
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    scanner: OrphanScanner = Depends(get_orphan_scanner),
):
    articles = db.query(Article).all()
    result = scanner.scan(articles)
    return ok(request, result.to_dict())


@router.post("/orphans/delete")
def delete_orphans(
    payload: OrphanDeleteIn,
    request: Request,
    admin: User = Depends(require_admin),
    scanner: OrphanScanner = Depends(get_orphan_scanner),
):
    report = scanner.delete_files(payload.filenames)
    audit("delete_orphans", admin, request, extra={"requested": report.total, "deleted": report.deleted, "failed": report.failed})
    return ok(request, report.to_dict())


@router.get("/{filename}")
@public_router.get("/uploads/{filename}")
def serve_upload(filename: str, uploads_root: Path = Depends(get_uploads_root)):
    if not is_valid_filename(filename):
        raise not_found("File not found")
    path = uploads_root / filename
    if not path.is_file():
        raise not_found("File not found")
    return FileResponse(str(path), media_type=content_type_for(filename))


@router.delete("/{filename}")
def delete_upload(
    filename: str,
    request: Request,
    admin: User = Depends(require_admin),
    deleter: SafeFileDeleter = Depends(get_file_deleter),
):
    result = deleter.delete_name(filename)
    audit("delete_upload", admin, request, filename, {"success": result.success, "deleted": result.deleted})
    return ok(request, result.to_dict())
