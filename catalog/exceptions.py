"""
Domain exceptions raised by catalog services.

The web layer maps these onto HTTP responses in backend.app.error_handlers.
Cache failures never surface here: the cache layer swallows and logs them.
"""


class CatalogError(Exception):
    """Base class for catalog errors carrying an HTTP status and an error code."""

    status_code: int = 400
    code: str = "CATALOG_ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class InvalidRequestError(CatalogError):
    status_code = 400
    code = "INVALID_REQUEST"


class ItemNotFoundError(CatalogError):
    """Raised when a catalog item, image or comment does not exist (or is inactive)."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity.capitalize()} not found", code=f"{entity.upper()}_NOT_FOUND")
        self.entity = entity
        self.entity_id = entity_id


class AuthenticationError(CatalogError):
    status_code = 401
    code = "UNAUTHORIZED"


class ImageProcessingError(CatalogError):
    """Raised when an uploaded file cannot be decoded or re-encoded."""

    status_code = 400
    code = "IMAGE_PROCESSING_FAILED"


class UploadFailedError(ImageProcessingError):
    """Raised when no file of an upload batch could be processed."""

    status_code = 500
    code = "UPLOAD_FAILED"


__all__ = [
    "CatalogError",
    "InvalidRequestError",
    "ItemNotFoundError",
    "AuthenticationError",
    "ImageProcessingError",
    "UploadFailedError",
]
