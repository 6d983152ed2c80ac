import logging
from fastapi import Request
from knowledge_base.models.user import User

logger = logging.getLogger("knowledge_base.audit")


def audit(action: str, admin: User, request: Request, target: str | int | None = None, extra: dict | None = None):
    ip = request.client.host if request.client else "unknown"
    logger.info(
        "AUDIT admin=%s action=%s target=%s ip=%s extra=%s",
        admin.username,
        action,
        target,
        ip,
        extra or {},
    )
