import logging
from knowledge_base.db.init_db import init_db

logger = logging.getLogger(__name__)


def run_migrations_safely():
    """
    Startup schema bootstrap:
    - create_all creates missing tables (existing data is untouched)
    - seed adds the default admin when absent
    """
    try:
        init_db()
        logger.info("Auto migration completed")
    except Exception as e:
        logger.exception("Auto migration failed: %s", e)
        raise
