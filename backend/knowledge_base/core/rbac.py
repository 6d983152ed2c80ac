from fastapi import Depends
from knowledge_base.api.deps import get_current_user
from knowledge_base.core.errors import permission_denied
from knowledge_base.models.user import User


def require_roles(*roles: str):
    def _guard(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise permission_denied()
        return user

    return _guard


require_admin = require_roles("admin")
