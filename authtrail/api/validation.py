"""Request body validation decorator.

@validate_request inspects the view signature. A parameter annotated with a
pydantic model (conventionally named ``data``) is filled from the JSON body;
other parameters (path variables) are passed through unchanged.

A missing or non-JSON body, or a body that fails model validation, raises
authtrail.exceptions.ValidationError (rendered as HTTP 400).
"""

import inspect
import json
from functools import wraps

from flask import request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError


def _find_model_param(f) -> tuple[str, type[BaseModel]] | None:
    for name, param in inspect.signature(f).parameters.items():
        annotation = param.annotation
        if inspect.isclass(annotation) and issubclass(annotation, BaseModel):
            return name, annotation
    return None


def validate_request(f):
    """Validate the JSON body against the view's pydantic model parameter."""
    model_param = _find_model_param(f)

    @wraps(f)
    def wrapper(*args, **kwargs):
        if model_param is None:
            return f(*args, **kwargs)

        name, model = model_param
        body = request.get_json(silent=True)
        if body is None:
            raise ValidationError(
                "Request body is required",
                {"expected": "application/json"}
            )

        try:
            kwargs[name] = model.model_validate(body)
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid request data",
                {"errors": json.loads(e.json(include_url=False))}
            )

        return f(*args, **kwargs)

    return wrapper
