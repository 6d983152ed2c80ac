import logging
import time
from pathlib import Path
from sqlalchemy import text
from sqlalchemy.orm import Session
from knowledge_base.db.session import engine, SessionLocal
from knowledge_base.models.base import Base
from knowledge_base.models.user import User
from knowledge_base.models.category import Category  # noqa: F401 - ensure table registered
from knowledge_base.models.article import Article  # noqa: F401 - ensure table registered
from knowledge_base.core.security import hash_password
from knowledge_base.core.config import settings

logger = logging.getLogger(__name__)


def ensure_sqlite_dir():
    """SQLite does not create missing parent directories for its file."""
    if engine.url.get_backend_name() != "sqlite":
        return
    database = engine.url.database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def seed(db: Session):
    """Create the default administrator if it does not exist."""
    admin = db.query(User).filter(User.username == settings.ADMIN_USERNAME).first()
    if not admin:
        db.add(
            User(
                username=settings.ADMIN_USERNAME,
                email=settings.ADMIN_EMAIL,
                role="admin",
                is_active=True,
                password_hash=hash_password(settings.ADMIN_PASSWORD),
            )
        )
        logger.info("Created default admin %s", settings.ADMIN_USERNAME)
    db.commit()


def wait_for_db(max_retries: int = 30, delay_seconds: int = 2):
    """Loop until DB is reachable to avoid container start flapping when the server is not ready."""
    for attempt in range(1, max_retries + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
                return
        except Exception:
            if attempt == max_retries:
                raise
            time.sleep(delay_seconds)


def init_db():
    ensure_sqlite_dir()
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed(db)
    finally:
        db.close()


def reset_db():
    Base.metadata.drop_all(bind=engine)
    init_db()


def main():
    ensure_sqlite_dir()
    wait_for_db()
    init_db()


if __name__ == "__main__":
    main()
