"""FastAPI 애플리케이션 진입점. 미들웨어, API 라우터, 시작 시 스키마/Community 그룹 준비를 등록합니다."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.database import Base, SessionLocal, engine
import app.models  # noqa: F401 - 모델 import로 metadata 등록
from app.routers import arrangements, auth, groups, songs, versions
from app.services import membership_service

logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Chordhub 악보 협업 서비스",
    description="곡/편곡 소유권, 편집 권한, Community 버전 이력을 관리하는 백엔드",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register all routers
app.include_router(auth.router)
app.include_router(groups.router)
app.include_router(songs.router)
app.include_router(arrangements.router)
app.include_router(versions.router)


@app.on_event("startup")
def ensure_schema():
    # 누락된 테이블을 만들고, 설정에 따라 Community 그룹을 준비한다.
    Base.metadata.create_all(bind=engine)
    if not settings.COMMUNITY_AUTO_PROVISION:
        return
    db = SessionLocal()
    try:
        membership_service.ensure_community_group(db)
    finally:
        db.close()


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "Chordhub"}
