"""로그인/토큰 API 라우터입니다. 데모 SSO 로그인과 현재 사용자 조회를 제공합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from daycare.database import get_db
from daycare.schemas.user import LoginRequest, MeOut, TokenResponse, UserOut
from daycare.services.auth_service import create_access_token, mock_sso_login
from daycare.middleware.auth_middleware import get_current_user
from daycare.models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = mock_sso_login(db, request.login_id)
    return TokenResponse(access_token=create_access_token(user), user=UserOut.model_validate(user))


@router.post("/logout")
def logout(_current_user: User = Depends(get_current_user)):
    # 토큰은 상태가 없으므로 클라이언트가 폐기한다.
    return {"message": "로그아웃 되었습니다."}


@router.get("/me", response_model=MeOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
