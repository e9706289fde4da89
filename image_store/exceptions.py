from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


class ImageStoreError(Exception):
    """Base class for errors raised by the image store core."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class ValidationError(ImageStoreError):
    status_code = 400


class InvalidName(ValidationError):
    pass


class DecodeError(ImageStoreError):
    status_code = 400


class NotFound(ImageStoreError):
    status_code = 404


class IOFailure(ImageStoreError):
    status_code = 500


class PathTaken(IOFailure):
    """Raised by an exclusive blob create when the target path already exists."""

    status_code = 409


class PersistenceError(ImageStoreError):
    status_code = 500


def create_error_response(error_message: str, status_code: int = 400) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    # Convert 403 from HTTPBearer to 401 for missing authentication
    if exc.status_code == 403 and "Not authenticated" in str(exc.detail):
        return JSONResponse(
            status_code=401,
            content=create_error_response("Authentication required", 401)
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )

async def image_store_exception_handler(request: Request, exc: ImageStoreError) -> JSONResponse:
    """Map core errors onto the standard error envelope"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.message, exc.status_code)
    )
