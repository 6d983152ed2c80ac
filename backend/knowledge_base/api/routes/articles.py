import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from fastapi import APIRouter, Depends, Request, File, UploadFile
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from knowledge_base.db.session import get_db
from knowledge_base.core.audit import audit
from knowledge_base.core.config import settings
from knowledge_base.core.errors import AppError, not_found, validation_error
from knowledge_base.core.rbac import require_admin
from knowledge_base.core.response import ok, created
from knowledge_base.core.storage import allowed_image_exts, file_ext, generate_upload_name, save_file_local, upload_url
from knowledge_base.api.deps import get_file_cleaner, get_uploads_root
from knowledge_base.files.attachments import dump_attachments, prepare_new, reconcile_attachments
from knowledge_base.files.cleanup import ArticleFileCleaner
from knowledge_base.models.article import Article
from knowledge_base.models.category import Category
from knowledge_base.models.user import User
from knowledge_base.schemas.article import ArticleCreateIn, ArticleUpdateIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/articles", tags=["articles"])

SUGGESTION_LIMIT = 5
MAX_PAGE_SIZE = 50


def _attachments_out(items) -> list[dict]:
    return [a.model_dump(exclude_none=True) for a in items]


def _article_out(a: Article, category_name: str | None, author_name: str | None) -> dict:
    return {
        "id": a.id,
        "title": a.title,
        "content": a.content,
        "category_id": a.category_id,
        "category_name": category_name,
        "created_by": a.created_by,
        "author_name": author_name,
        "files": _attachments_out(a.file_list),
        "images": _attachments_out(a.image_list),
        "enable_slideshow": a.enable_slideshow,
        "created_at": a.created_at.isoformat() if a.created_at else None,
        "updated_at": a.updated_at.isoformat() if a.updated_at else None,
    }


def _with_names(db: Session):
    return (
        db.query(Article, Category.name, User.username)
        .outerjoin(Category, Article.category_id == Category.id)
        .outerjoin(User, Article.created_by == User.id)
    )


def _load_out(db: Session, article_id: int) -> dict:
    row = _with_names(db).filter(Article.id == article_id).first()
    if not row:
        raise not_found("Article not found")
    return _article_out(*row)


def _get_article(db: Session, article_id: int) -> Article:
    a = db.query(Article).filter(Article.id == article_id).first()
    if not a:
        raise not_found("Article not found")
    return a


def _check_category(db: Session, category_id: int | None):
    if category_id is not None and not db.query(Category.id).filter(Category.id == category_id).first():
        raise validation_error("Category does not exist")


def _required_text(value: str | None, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise validation_error(f"Article {field} is required", {"field": field})
    return value


@router.get("")
def list_articles(request: Request, db: Session = Depends(get_db), category_id: int | None = None):
    q = _with_names(db)
    if category_id:
        q = q.filter(Article.category_id == category_id)
    rows = q.order_by(Article.created_at.desc(), Article.id.desc()).all()
    return ok(request, [_article_out(*row) for row in rows])


@router.get("/search")
def search_articles(
    request: Request,
    db: Session = Depends(get_db),
    q: str = "",
    category: str = "all",
    page: int = 1,
    limit: int = 10,
):
    query = q.strip()
    if not query:
        raise validation_error("Search query is required")
    page = max(1, page)
    limit = min(max(1, limit), MAX_PAGE_SIZE)

    like = f"%{query}%"
    base = _with_names(db).filter(or_(Article.title.ilike(like), Article.content.ilike(like)))
    if category != "all":
        try:
            base = base.filter(Article.category_id == int(category))
        except ValueError:
            raise validation_error("category must be 'all' or a category id")

    total = base.count()
    rows = (
        base.order_by(Article.created_at.desc(), Article.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return ok(
        request,
        {
            "articles": [_article_out(*row) for row in rows],
            "pagination": {"page": page, "limit": limit, "total": total, "pages": math.ceil(total / limit)},
        },
    )


@router.get("/search/suggestions")
def search_suggestions(request: Request, db: Session = Depends(get_db), q: str = ""):
    query = q.strip()
    if len(query) < 2:
        return ok(request, [])
    rows = (
        db.query(Article.id, Article.title, Category.name)
        .outerjoin(Category, Article.category_id == Category.id)
        .filter(Article.title.ilike(f"%{query}%"))
        .order_by(Article.created_at.desc(), Article.id.desc())
        .limit(SUGGESTION_LIMIT)
        .all()
    )
    return ok(request, [{"id": aid, "title": title, "category_name": cname} for aid, title, cname in rows])


@router.get("/stats/categories")
def stats_by_category(request: Request, db: Session = Depends(get_db)):
    rows = (
        db.query(Category.id, func.count(Article.id))
        .outerjoin(Article, Article.category_id == Category.id)
        .group_by(Category.id)
        .order_by(Category.id.asc())
        .all()
    )
    return ok(request, {str(cid): cnt for cid, cnt in rows})


@router.get("/management/stats")
def management_stats(request: Request, db: Session = Depends(get_db)):
    total_articles = db.query(func.count(Article.id)).scalar() or 0
    active_categories = (
        db.query(func.count(func.distinct(Article.category_id))).filter(Article.category_id.isnot(None)).scalar() or 0
    )
    total_categories = db.query(func.count(Category.id)).scalar() or 0
    return ok(
        request,
        {
            "total_articles": total_articles,
            "active_categories": active_categories,
            "total_categories": total_categories,
            "recent_articles_count": min(total_articles, 5),
        },
    )


@router.post("/tinymce/upload")
def upload_editor_image(
    request: Request,
    admin: User = Depends(require_admin),
    uploads_root: Path = Depends(get_uploads_root),
    file: UploadFile = File(...),
):
    ext = file_ext(file.filename)
    if ext not in allowed_image_exts():
        raise AppError(code="FILE_TYPE_NOT_ALLOWED", message="Only image uploads are allowed", status_code=415)

    name = generate_upload_name(ext)
    try:
        size = save_file_local(file.file, uploads_root / name, settings.MAX_UPLOAD_MB * 1024 * 1024)
    except ValueError:
        raise AppError(code="FILE_TOO_LARGE", message="Image is too large", status_code=413)

    audit("upload_image", admin, request, name, {"size": size})
    return created(request, {"location": upload_url(name), "filename": name, "size": size})


@router.get("/{article_id}")
def get_article(article_id: int, request: Request, db: Session = Depends(get_db)):
    return ok(request, _load_out(db, article_id))


@router.get("/{article_id}/edit")
def get_article_for_edit(
    article_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return ok(request, _load_out(db, article_id))


@router.post("")
def create_article(
    payload: ArticleCreateIn,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    title = _required_text(payload.title, "title")
    content = _required_text(payload.content, "content")
    _check_category(db, payload.category_id)

    a = Article(
        title=title,
        content=content,
        category_id=payload.category_id,
        created_by=admin.id,
        files=dump_attachments(prepare_new(payload.files)),
        images=dump_attachments(prepare_new(payload.images, with_size=False)),
        enable_slideshow=payload.enable_slideshow,
    )
    db.add(a)
    db.commit()
    audit("create_article", admin, request, a.id, {"files": len(payload.files), "images": len(payload.images)})
    return created(request, _load_out(db, a.id))


@router.put("/{article_id}")
def update_article(
    article_id: int,
    payload: ArticleUpdateIn,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    title = _required_text(payload.title, "title")
    content = _required_text(payload.content, "content")
    a = _get_article(db, article_id)
    _check_category(db, payload.category_id)

    files = reconcile_attachments(a.file_list, payload.files_to_remove, payload.files)
    images = reconcile_attachments(
        a.image_list, payload.images_to_remove, [i.model_copy(update={"size": None}) for i in payload.images]
    )

    a.title = title
    a.content = content
    a.category_id = payload.category_id
    if payload.enable_slideshow is not None:
        a.enable_slideshow = payload.enable_slideshow
    a.files = dump_attachments(files)
    a.images = dump_attachments(images)
    a.updated_at = datetime.now(timezone.utc)
    db.commit()

    audit(
        "update_article",
        admin,
        request,
        a.id,
        {
            "files_added": len(payload.files),
            "files_removed": len(payload.files_to_remove),
            "images_added": len(payload.images),
            "images_removed": len(payload.images_to_remove),
        },
    )
    data = _load_out(db, a.id)
    new_ids = {str(x.id) for x in files + images if x.is_new}
    data["added_attachment_ids"] = sorted(new_ids)
    return ok(request, data)


@router.delete("/{article_id}")
def delete_article(
    article_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    cleaner: ArticleFileCleaner = Depends(get_file_cleaner),
):
    a = _get_article(db, article_id)
    report = cleaner.cleanup(a)
    db.delete(a)
    db.commit()
    audit("delete_article", admin, request, article_id, {"files_deleted": report.total_deleted})
    return ok(request, {"id": article_id, "message": "Article deleted", "cleanup": report.to_dict()})


@router.post("/{article_id}/cleanup-files")
def cleanup_article_files(
    article_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    cleaner: ArticleFileCleaner = Depends(get_file_cleaner),
):
    a = _get_article(db, article_id)
    report = cleaner.cleanup(a)
    audit("cleanup_article_files", admin, request, article_id, {"files_deleted": report.total_deleted})
    return ok(request, report.to_dict())
