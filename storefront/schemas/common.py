"""Response envelope and shared schema helpers"""
from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from storefront.errors import ValidationError

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class CamelModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase in JSON"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ApiResponse(BaseModel, Generic[T]):
    """``{success, message, data?, error?}`` envelope used by every /api route"""

    success: bool
    message: str
    data: Optional[T] = None
    error: Optional[str] = None


def format_response(success: bool, message: str, data: Any = None, error: Optional[str] = None) -> ApiResponse:
    """Build an envelope, leaving ``data`` / ``error`` unset when not given.

    Routes are declared with ``response_model_exclude_unset=True`` so unset
    keys are omitted from the JSON body.
    """
    fields = {"success": success, "message": message}
    if data is not None:
        fields["data"] = data
    if error is not None:
        fields["error"] = error
    return ApiResponse(**fields)


def describe_validation_errors(errors: Sequence[dict]) -> str:
    """Flatten pydantic error dicts into one readable message"""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


def parse_json_field(model: Type[M], raw: Optional[str]) -> M:
    """Validate a JSON document sent inside a multipart form field.

    Raises:
        ValidationError: not JSON, or does not satisfy ``model``.
    """
    try:
        return model.model_validate_json(raw or "{}")
    except PydanticValidationError as exc:
        raise ValidationError(describe_validation_errors(exc.errors())) from exc
