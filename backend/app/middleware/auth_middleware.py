from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from app.database import get_db
from app.models.user import User
from app.config import settings
from app.services.auth_service import ALGORITHM
from app.utils.errors import NotAuthenticatedError

security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        raise NotAuthenticatedError("Invalid or expired token")


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise NotAuthenticatedError()
    payload = decode_token(credentials.credentials)
    user_id = payload.get("sub")
    if user_id is None:
        raise NotAuthenticatedError("Invalid token payload")

    user = db.query(User).filter(User.user_id == int(user_id), User.is_active == True).first()  # noqa: E712
    if not user:
        raise NotAuthenticatedError("User not found or inactive")
    return user
