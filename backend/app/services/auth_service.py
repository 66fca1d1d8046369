"""Auth Service 도메인 서비스 레이어입니다. 토큰 발급과 로그인 사용자 확인을 담당합니다."""

from datetime import datetime, timedelta
from jose import jwt
from sqlalchemy.orm import Session
from app.models.user import User
from app.config import settings
from app.utils.errors import NotAuthenticatedError

ALGORITHM = "HS256"


def create_access_token(user_id: int) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def mock_login(db: Session, username: str) -> User:
    user = db.query(User).filter(User.username == username, User.is_active == True).first()  # noqa: E712
    if not user:
        raise NotAuthenticatedError(f"사용자 '{username}'에 해당하는 활성 계정을 찾을 수 없습니다.")
    return user
