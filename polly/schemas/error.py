from pydantic import BaseModel
from typing import Optional, Any, Dict, List


class ErrorDetail(BaseModel):
    """Individual error detail for validation errors"""
    loc: List[Any]  # Location of the error (field path)
    msg: str        # Error message
    type: str       # Error type


class ErrorResponse(BaseModel):
    """Envelope of every failed request"""
    success: bool = False
    message: str
    error_code: str
    details: Optional[Dict[str, Any]] = None
    timestamp: str
    path: str
    request_id: str


class ValidationErrorResponse(ErrorResponse):
    """Response schema for validation errors (422)"""
    message: str = "Validation failed"
    error_code: str = "VALIDATION_ERROR"
    errors: List[ErrorDetail] = []
