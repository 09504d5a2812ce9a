"""Helpers for validating JSON request bodies with :mod:`wtforms`."""

from typing import Any, List, Optional

from werkzeug.datastructures import MultiDict
from werkzeug.exceptions import BadRequest
from wtforms import Form


class ValidationFailed(BadRequest):
    """The request body did not pass validation."""

    description = 'Validation failed'

    def __init__(self, details: List[str]) -> None:
        super(ValidationFailed, self).__init__()
        self.details = details


def to_formdata(payload: Optional[dict]) -> MultiDict:
    """
    Convert a decoded JSON object into form data for a :class:`.Form`.

    Booleans become ``'true'``/``'false'``, numbers are stringified, and
    ``null`` values are treated as absent.
    """
    formdata = MultiDict()
    if not isinstance(payload, dict):
        return formdata
    for key, value in payload.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        elif isinstance(value, list):
            for item in value:
                formdata.add(key, str(item))
            continue
        formdata.add(key, str(value))
    return formdata


def strip(value: Any) -> Any:
    """Strip leading and trailing whitespace from a string field."""
    if isinstance(value, str):
        return value.strip()
    return value


def errors(form: Form) -> List[str]:
    """Get all of the error messages on ``form``, in field order."""
    return [message for field in form for message in field.errors]


def validate(form: Form) -> None:
    """
    Validate ``form``.

    Raises
    ------
    :class:`ValidationFailed`
        Carrying every violation, so that the caller can fix them all at once.

    """
    if not form.validate():
        raise ValidationFailed(errors(form))
