# site_erp/common/response.py

from typing import Any, Generic, List, Optional, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every endpoint: { success, message?, data?, count? }."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    count: Optional[int] = None


class ErrorResponse:
    @staticmethod
    def send(message="An error occurred", status_code=500, errors: Optional[List[Any]] = None):
        response = {
            "success": False,
            "message": message,
        }
        if errors:
            response["errors"] = errors
        return JSONResponse(status_code=status_code, content=response)
