from fastapi import APIRouter, Depends, Request
from sqlalchemy import func
from sqlalchemy.orm import Session
from knowledge_base.db.session import get_db
from knowledge_base.core.audit import audit
from knowledge_base.core.errors import conflict, not_found, validation_error
from knowledge_base.core.rbac import require_admin
from knowledge_base.core.response import ok, created
from knowledge_base.models.article import Article
from knowledge_base.models.category import Category
from knowledge_base.models.user import User
from knowledge_base.schemas.category import CategoryIn

router = APIRouter(prefix="/api/categories", tags=["categories"])


def _article_counts(db: Session) -> dict[int, int]:
    rows = (
        db.query(Article.category_id, func.count(Article.id))
        .filter(Article.category_id.isnot(None))
        .group_by(Article.category_id)
        .all()
    )
    return {cid: cnt for cid, cnt in rows}


def _category_out(db: Session, c: Category, article_count: int) -> dict:
    creator = db.query(User.username).filter(User.id == c.created_by).scalar() if c.created_by else None
    return {
        "id": c.id,
        "name": c.name,
        "description": c.description,
        "created_by": c.created_by,
        "created_by_name": creator,
        "created_at": c.created_at.isoformat() if c.created_at else None,
        "article_count": article_count,
    }


def _count_for(db: Session, category_id: int) -> int:
    return db.query(func.count(Article.id)).filter(Article.category_id == category_id).scalar() or 0


def _clean_name(payload: CategoryIn) -> str:
    name = (payload.name or "").strip()
    if not name:
        raise validation_error("Category name is required")
    return name


def _ensure_unique(db: Session, name: str, exclude_id: int | None = None):
    q = db.query(Category).filter(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        q = q.filter(Category.id != exclude_id)
    if q.first():
        raise conflict("A category with this name already exists")


@router.get("")
def list_categories(request: Request, db: Session = Depends(get_db)):
    counts = _article_counts(db)
    rows = db.query(Category).order_by(Category.name.asc()).all()
    return ok(request, [_category_out(db, c, counts.get(c.id, 0)) for c in rows])


@router.get("/stats/articles")
def category_stats(request: Request, db: Session = Depends(get_db)):
    rows = (
        db.query(Category.id, func.count(Article.id))
        .outerjoin(Article, Article.category_id == Category.id)
        .group_by(Category.id)
        .all()
    )
    return ok(request, {str(cid): cnt for cid, cnt in rows})


@router.get("/{category_id}")
def get_category(category_id: int, request: Request, db: Session = Depends(get_db)):
    c = db.query(Category).filter(Category.id == category_id).first()
    if not c:
        raise not_found("Category not found")
    return ok(request, _category_out(db, c, _count_for(db, c.id)))


@router.post("")
def create_category(
    payload: CategoryIn,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    name = _clean_name(payload)
    _ensure_unique(db, name)
    c = Category(name=name, description=(payload.description or "").strip(), created_by=admin.id)
    db.add(c)
    db.commit()
    audit("create_category", admin, request, c.id, {"name": c.name})
    return created(request, _category_out(db, c, 0))


@router.put("/{category_id}")
def update_category(
    category_id: int,
    payload: CategoryIn,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    name = _clean_name(payload)
    c = db.query(Category).filter(Category.id == category_id).first()
    if not c:
        raise not_found("Category not found")
    _ensure_unique(db, name, exclude_id=c.id)
    c.name = name
    c.description = (payload.description or "").strip()
    db.commit()
    audit("update_category", admin, request, c.id, {"name": c.name})
    return ok(request, _category_out(db, c, _count_for(db, c.id)))


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    c = db.query(Category).filter(Category.id == category_id).first()
    if not c:
        raise not_found("Category not found")
    if _count_for(db, c.id) > 0:
        raise validation_error("Cannot delete a category that still contains articles")
    db.delete(c)
    db.commit()
    audit("delete_category", admin, request, category_id)
    return ok(request, {"id": category_id, "message": "Category deleted"})
