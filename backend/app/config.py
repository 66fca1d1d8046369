"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./chordhub.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    LOG_LEVEL: str = "INFO"

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # Community group (is_system_group=True 인 단일 그룹)
    COMMUNITY_GROUP_NAME: str = "Community"
    COMMUNITY_GROUP_SLUG: str = "community"
    COMMUNITY_GROUP_DESCRIPTION: str = "누구나 함께 편집하는 공용 악보 라이브러리"
    # 시작 시 Community 그룹이 없으면 자동 생성한다.
    COMMUNITY_AUTO_PROVISION: bool = True

    # Version history
    VERSION_HISTORY_MAX_LIMIT: int = 200

    class Config:
        # 실행 cwd와 무관하게 backend/.env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
