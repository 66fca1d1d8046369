from typing import Optional

from app.models.user import User

UNKNOWN_DISPLAY_NAME = "Unknown"


def user_display_name(user: User) -> str:
    # 실명은 본인이 공개에 동의했을 때만 쓴다.
    if user.show_real_name and (user.name or "").strip():
        return user.name.strip()
    return (user.display_name or "").strip() or user.username


def format_user_info(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {
        "user_id": user.user_id,
        "username": user.username,
        "display_name": user_display_name(user),
    }
