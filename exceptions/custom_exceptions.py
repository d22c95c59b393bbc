from fastapi import status


class BaseAppException(Exception):
    """Base class for all app-specific exceptions."""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: dict = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

class ConfigurationException(BaseAppException):
    """Required settings or credentials are missing."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, details)

class BusinessValidationException(BaseAppException):
    """Invalid input or business rule violation."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY, details)

class DefinitionParseException(BusinessValidationException):
    """Campaign definition text contains a malformed row."""

class AdCopyValidationException(BusinessValidationException):
    """Ad copy violates platform count or length limits."""

class GoogleAPIException(BaseAppException):
    """Google Ads API call failed."""
    def __init__(
        self,
        message: str = "Google Ads API request failed",
        details: dict = None,
    ):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY, details)

class GoogleAdsAuthException(GoogleAPIException):
    """Google Ads rejected the credentials (401/403 or token refresh)."""

class GoogleAdsValidationException(GoogleAPIException):
    """Google Ads rejected the request payload (400)."""

class DatabaseException(BaseAppException):
    """Database operation failed."""
    def __init__(self, message: str = "A database error occurred", details: dict = None):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, details)

class InternalServerException(BaseAppException):
    """Unexpected error in backend logic."""
    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)

class ResourceNotFoundException(BaseAppException):
    """Requested resource does not exist."""
    def __init__(self, message: str = "Resource not found", details: dict = None):
        super().__init__(message, status.HTTP_404_NOT_FOUND, details)
