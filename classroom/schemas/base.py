from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Sequence, Type, TypeVar

from classroom.core.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class CamelModel(BaseModel):
    """
    Base for API payloads.

    Fields are declared in snake_case and exchanged in camelCase
    (roll_year <-> rollYear). Either spelling is accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    message: str


def first_error_message(errors: Sequence[Dict[str, Any]]) -> str:
    """
    Client-facing message for a list of pydantic errors.

    Messages raised by our own validators are returned verbatim; built-in
    errors are prefixed with the failing field.
    """
    if not errors:
        return "Invalid request."
    err = errors[0]
    raised = err.get("ctx", {}).get("error")
    if raised is not None:
        return str(raised)
    loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
    if loc:
        return f"{'.'.join(loc)}: {err.get('msg', 'invalid value')}"
    return err.get("msg", "Invalid request.")


def parse_form(model_cls: Type[ModelT], **data: Any) -> ModelT:
    """Validate multipart form fields into a schema, raising our ValidationError"""
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(first_error_message(e.errors()))
