from pathlib import Path
from fastapi import Depends, Header
from sqlalchemy.orm import Session
from knowledge_base.db.session import get_db
from knowledge_base.core.config import settings
from knowledge_base.core.security import decode_access_token
from knowledge_base.core.errors import auth_required, auth_invalid_credentials
from knowledge_base.files.cleanup import ArticleFileCleaner
from knowledge_base.files.deleter import SafeFileDeleter
from knowledge_base.files.orphans import OrphanScanner
from knowledge_base.models.user import User


def _bearer(authorization: str | None) -> str | None:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None


def _user_from_token(db: Session, token: str) -> User | None:
    try:
        payload = decode_access_token(token)
        uid = int(payload.get("sub"))
    except Exception:
        return None
    return db.query(User).filter(User.id == uid, User.is_active == True).first()  # noqa: E712


def get_token_header(authorization: str | None = Header(default=None)) -> str:
    token = _bearer(authorization)
    if not token:
        raise auth_required()
    return token


def get_current_user(db: Session = Depends(get_db), token: str = Depends(get_token_header)) -> User:
    user = _user_from_token(db, token)
    if not user:
        raise auth_invalid_credentials()
    return user


def get_optional_user(
    db: Session = Depends(get_db), authorization: str | None = Header(default=None)
) -> User | None:
    token = _bearer(authorization)
    if not token:
        return None
    return _user_from_token(db, token)


def get_uploads_root() -> Path:
    return Path(settings.UPLOAD_DIR)


def get_file_deleter(root: Path = Depends(get_uploads_root)) -> SafeFileDeleter:
    return SafeFileDeleter(root)


def get_file_cleaner(root: Path = Depends(get_uploads_root)) -> ArticleFileCleaner:
    return ArticleFileCleaner(root)


def get_orphan_scanner(root: Path = Depends(get_uploads_root)) -> OrphanScanner:
    return OrphanScanner(root)
