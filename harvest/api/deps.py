# harvest/api/deps.py
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from harvest.data.database import get_db
from harvest.data.models.user import UserModel
from harvest.domain.enums import Role
from harvest.repos.user_repo import UserRepo
from harvest.services.auth_service import decode_access_token, InvalidTokenError
from harvest.services.lock_service import LockService

# auto_error=False: a missing header is a 401 here, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)

_lock_service: LockService | None = None


def get_lock_service() -> LockService:
    global _lock_service
    if _lock_service is None:
        _lock_service = LockService()
    return _lock_service


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> UserModel:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Access denied. No token provided.")

    try:
        user_id = decode_access_token(credentials.credentials)
    except InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e))

    user = UserRepo(db).get_user(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def require_roles(*roles: Role):
    allowed = {r.value for r in roles}

    def checker(user: UserModel = Depends(get_current_user)) -> UserModel:
        if user.role not in allowed:
            raise HTTPException(status_code=403, detail="You do not have permission to perform this action")
        return user

    return checker


require_admin = require_roles(Role.ADMIN)
require_employee = require_roles(Role.EMPLOYEE, Role.ADMIN)
require_producer = require_roles(Role.PRODUCER, Role.ADMIN)
