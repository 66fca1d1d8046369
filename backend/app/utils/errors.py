"""서비스 레이어에서 사용하는 HTTP 오류 분류입니다."""

from fastapi import HTTPException, status


class NotAuthenticatedError(HTTPException):
    def __init__(self, detail: str = "로그인이 필요합니다."):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class PermissionDeniedError(HTTPException):
    def __init__(self, detail: str = "권한이 없습니다."):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "대상을 찾을 수 없습니다."):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InvalidStateError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class TransactionConflictError(HTTPException):
    # 같은 콘텐츠에 대한 동시 쓰기 충돌. 클라이언트가 그대로 재시도하면 된다.
    retryable = True

    def __init__(self, detail: str = "다른 변경과 충돌했습니다. 다시 시도해 주세요."):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            headers={"Retry-After": "0"},
        )
