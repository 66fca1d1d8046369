"""SQLAlchemy 엔진/세션 생성과 트랜잭션 경계를 관리합니다."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.config import settings
from app.utils.errors import InvalidStateError, TransactionConflictError

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# 버전 번호 유니크 제약. sqlite는 제약 이름 대신 컬럼 목록을 메시지에 담는다.
VERSION_CONFLICT_MARKERS = (
    "uq_content_version",
    "content_versions.content_type, content_versions.content_id, content_versions.version",
)
LOCK_CONFLICT_MARKERS = (
    "database is locked",
    "deadlock detected",
    "could not serialize access",
    "could not obtain lock",
    "lock wait timeout",
)


def _db_message(exc: Exception) -> str:
    return str(getattr(exc, "orig", None) or exc).lower()


def is_retryable_conflict(exc: Exception) -> bool:
    message = _db_message(exc)
    if isinstance(exc, IntegrityError):
        return any(marker in message for marker in VERSION_CONFLICT_MARKERS)
    if isinstance(exc, OperationalError):
        return any(marker in message for marker in LOCK_CONFLICT_MARKERS)
    return False


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """하나의 논리 작업을 단일 트랜잭션으로 실행한다.

    블록이 정상 종료되면 commit, 예외가 나면 rollback 후 그대로 전파한다.
    버전 번호 충돌과 잠금 경합만 재시도 가능한 409로 바꾼다. 그 밖의 제약 위반은
    재시도해도 같은 결과이므로 400(InvalidState)으로 올린다.
    """
    try:
        yield db
        db.commit()
    except (IntegrityError, OperationalError) as exc:
        db.rollback()
        if is_retryable_conflict(exc):
            logger.warning("[db] transaction conflict: %s", _db_message(exc))
            raise TransactionConflictError() from exc
        if isinstance(exc, IntegrityError):
            logger.warning("[db] constraint violation: %s", _db_message(exc))
            raise InvalidStateError("데이터 제약 조건에 맞지 않아 저장하지 못했습니다.") from exc
        raise
    except Exception:
        db.rollback()
        raise
