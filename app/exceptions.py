"""
Application exceptions.
Each carries the HTTP status it maps to; app.main turns them into JSON responses.
"""
from typing import Any, Dict, List, Optional


class HotelAPIError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None, **extra: Any):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra
        super().__init__(message)

    def to_content(self) -> Dict[str, Any]:
        content = {"error": self.message}
        content.update({k: v for k, v in self.extra.items() if v is not None})
        return content


class ValidationError(HotelAPIError):
    """Missing file, wrong MIME class, oversized video or malformed fields."""

    status_code = 400


class AuthorizationError(HotelAPIError):
    """Admin check failed. Callers only ever see a generic "Unauthorized"."""

    status_code = 401

    def __init__(self, reason: str = "Unauthorized"):
        if "Unauthorized" not in reason:
            reason = f"Unauthorized: {reason}"
        super().__init__(reason)

    def to_content(self) -> Dict[str, Any]:
        return {"error": "Unauthorized"}


class NotFoundError(HotelAPIError):
    status_code = 404


class ConfigurationError(HotelAPIError):
    """Media host credentials are missing."""

    status_code = 500

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(
            f"Cloudinary configuration missing: {', '.join(self.missing)}",
            missing=self.missing,
        )


class UpstreamError(HotelAPIError):
    """Media host transport or business failure."""

    status_code = 500

    def __init__(self, message: str, detail: Optional[str] = None, status_code: Optional[int] = None, **extra: Any):
        self.detail = detail
        super().__init__(message, status_code=status_code, detail=detail, **extra)
