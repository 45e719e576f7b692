# app/schemas/common.py
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """
    Uniform success envelope: {success, message, data?}.

    Failures use the same shape with `error` instead of `data`
    (see app.core.errors.error_envelope).
    """

    success: bool = True
    message: str
    data: T | None = None
