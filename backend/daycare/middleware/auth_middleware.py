"""Bearer JWT 인증과 역할 기반 접근 제어 의존성입니다."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from daycare.database import get_db
from daycare.models.user import User
from daycare.config import settings
from daycare.utils.permissions import ADMIN, STAFF_ROLES

security = HTTPBearer()

ALGORITHM = "HS256"


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="유효하지 않거나 만료된 토큰입니다.",
        )


def _load_active_user(db: Session, raw_user_id) -> User:
    try:
        user_id = int(raw_user_id)
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="토큰 정보가 올바르지 않습니다.")
    user = db.query(User).filter(User.user_id == user_id, User.is_active == True).first()  # noqa: E712
    if not user:
        raise HTTPException(status_code=401, detail="비활성 또는 존재하지 않는 사용자입니다.")
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    payload = decode_token(credentials.credentials)
    user = _load_active_user(db, payload.get("sub"))
    # 토큰 발급 이후 역할이 바뀐 계정은 다시 로그인해야 한다.
    token_role = payload.get("role")
    if token_role is not None and token_role != user.role:
        raise HTTPException(status_code=401, detail="권한 정보가 변경되었습니다. 다시 로그인하세요.")
    return user


def require_roles(*roles: str):
    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"다음 역할만 접근할 수 있습니다: {', '.join(roles)}",
            )
        return current_user
    return checker


require_staff = require_roles(*STAFF_ROLES)
require_admin = require_roles(ADMIN)
