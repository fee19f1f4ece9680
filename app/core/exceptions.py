from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class AIError(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=503,
            error_code="AI_SERVICE_UNAVAILABLE",
            details=details
        )

class AIResponseParseError(AIError):
    """The model answered, but not with parseable JSON."""

class AIRateLimitError(AppException):
    def __init__(self):
        super().__init__(
            message="Rate limit exceeded. Please try again.",
            status_code=429,
            error_code="AI_RATE_LIMITED"
        )

class AIQuotaError(AppException):
    def __init__(self):
        super().__init__(
            message="AI credits exhausted. Please add credits to continue.",
            status_code=402,
            error_code="AI_QUOTA_EXHAUSTED"
        )

class AIKillSwitchError(AppException):
    def __init__(self):
        super().__init__(
            message="AI services are currently offline for maintenance.",
            status_code=503,
            error_code="AI_KILL_SWITCH_ACTIVE"
        )

class ScraperError(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=502,
            error_code="SCRAPER_UNAVAILABLE",
            details=details
        )

class FileValidationError(AppException):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code="INVALID_FILE"
        )

class NotFoundError(AppException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )

class InvalidStatusTransition(AppException):
    def __init__(self, current: str, requested: str):
        super().__init__(
            message=f"Cannot move resume from '{current}' to '{requested}'",
            status_code=409,
            error_code="INVALID_STATUS_TRANSITION",
            details={"current": current, "requested": requested}
        )

class GatewayActionError(AppException):
    def __init__(self, message: str, error_code: str = "INVALID_PARAMS"):
        super().__init__(
            message=message,
            status_code=400,
            error_code=error_code
        )
