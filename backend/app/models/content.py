"""버전 관리 대상 콘텐츠(곡/편곡)의 공통 타입과 믹스인 정의입니다."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


OWNER_TYPE_GROUP = "group"


class ContentType(str, Enum):
    SONG = "song"
    ARRANGEMENT = "arrangement"


class VersionableContent:
    """곡/편곡 모델이 공유하는 소유권·스냅샷 기능.

    하위 클래스는 ``content_type``, ``snapshot_class``, ``pk_name`` 을 지정한다.
    스냅샷은 편집 가능한 필드만 담으며 소유권/작성자 같은 메타 필드는 포함하지 않는다.
    """

    content_type = None
    snapshot_class = None
    pk_name = None

    @property
    def content_id(self) -> int:
        return getattr(self, self.pk_name)

    @property
    def is_group_owned(self) -> bool:
        return self.owner_type == OWNER_TYPE_GROUP and self.owner_id is not None

    def is_owned_by_group(self, group_id: Optional[int]) -> bool:
        return group_id is not None and self.is_group_owned and int(self.owner_id) == int(group_id)

    def snapshot_fields(self) -> BaseModel:
        fields = self.snapshot_class.model_fields
        return self.snapshot_class.model_validate({name: getattr(self, name) for name in fields})

    def apply_snapshot(self, snapshot: BaseModel) -> None:
        for name, value in snapshot.model_dump().items():
            setattr(self, name, value)
        self.updated_at = datetime.utcnow()

    def apply_patch(self, values: dict) -> None:
        for name, value in values.items():
            setattr(self, name, value)
        self.updated_at = datetime.utcnow()

    def set_group_owner(self, group_id: int) -> None:
        self.owner_type = OWNER_TYPE_GROUP
        self.owner_id = group_id
        self.updated_at = datetime.utcnow()

    def clear_owner(self) -> None:
        self.owner_type = None
        self.owner_id = None
        self.updated_at = datetime.utcnow()
