"""
도메인 예외

서비스 계층은 이 예외들만 던지고, HTTP 상태 코드 변환은 main.py의 예외 핸들러가 맡는다.
"""

from typing import Any, Dict, List, Optional


class AppError(Exception):
    """애플리케이션 예외 기본형"""
    status_code: int = 500
    default_message: str = "서버 내부 오류가 발생했습니다."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        return {"message": self.message, "detail": self.message}


class ValidationError(AppError):
    """잘못된 입력 (400)"""
    status_code = 400
    default_message = "입력값이 올바르지 않습니다."

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class InvalidEmbedUrlError(ValidationError):
    """임베드 URL로 변환할 수 없는 링크"""
    default_message = "지원하지 않는 URL 형식입니다."


class ForbiddenError(AppError):
    status_code = 403
    default_message = "권한이 없습니다."


class NotFoundError(AppError):
    status_code = 404
    default_message = "요청한 리소스를 찾을 수 없습니다."


class MediaTooLargeError(AppError):
    status_code = 413
    default_message = "파일 크기가 허용 범위를 초과했습니다."


class RateLimitedError(AppError):
    status_code = 429
    default_message = "요청이 너무 많습니다. 잠시 후 다시 시도해주세요."


class UpstreamMediaError(AppError):
    """외부 미디어 호스트 호출 실패"""
    status_code = 500
    default_message = "이미지 업로드 중 오류가 발생했습니다."
