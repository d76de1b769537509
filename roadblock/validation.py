"""Form validation pipeline.

Form schemas are pydantic models describing each field's type, bounds and
transforms. Cross-field rules are declared on the schema as a
``refinements`` tuple and are only evaluated once every field is valid.

``validate_form`` never raises for bad input: it returns either the parsed
schema instance or a ``ValidationFailure`` carrying the submitted values
back so the form can be re-rendered as the user left it.
"""
import re
from dataclasses import dataclass, field
from typing import Annotated, Any, Callable, Mapping, NamedTuple, Optional, TypeVar, Union

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, BeforeValidator, PositiveInt, TypeAdapter, ValidationError

M = TypeVar('M', bound=BaseModel)

_WHOLE_NUMBER = re.compile(r'[1-9][0-9]*')


def _digits_only(value):
    # lax int parsing would take "3.0", "+5" or "1_000"
    if isinstance(value, str) and not _WHOLE_NUMBER.fullmatch(value):
        raise ValueError('Input should be a positive whole number')
    return value


PositiveWholeNumber = Annotated[PositiveInt, BeforeValidator(_digits_only)]

_positive_int = TypeAdapter(PositiveWholeNumber)


class Refinement(NamedTuple):
    check: Callable[[Any], bool]
    message: str
    # None attaches the message to the form instead of a field
    path: Optional[str] = None


@dataclass
class ValidationFailure:
    fields: dict[str, str]
    field_errors: dict[str, list[str]] = field(default_factory=dict)
    form_error: str = ''

    def to_response(self, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content={
                'fields': self.fields,
                'field_errors': self.field_errors,
                'form_error': self.form_error,
            },
        )


def _flatten(exc: ValidationError) -> tuple[dict[str, list[str]], list[str]]:
    field_errors: dict[str, list[str]] = {}
    form_errors: list[str] = []
    for error in exc.errors():
        if error['loc']:
            field_errors.setdefault(str(error['loc'][0]), []).append(error['msg'])
        else:
            form_errors.append(error['msg'])
    return field_errors, form_errors


def validate_form(schema: type[M], fields: Mapping[str, Any]) -> Union[M, ValidationFailure]:
    raw = {key: value for key, value in fields.items() if isinstance(value, str)}

    try:
        data = schema.model_validate(raw)
    except ValidationError as exc:
        field_errors, form_errors = _flatten(exc)
        return ValidationFailure(raw, field_errors, ', '.join(form_errors))

    field_errors: dict[str, list[str]] = {}
    form_errors: list[str] = []
    for rule in getattr(schema, 'refinements', ()):
        if rule.check(data):
            continue
        if rule.path:
            field_errors.setdefault(rule.path, []).append(rule.message)
        else:
            form_errors.append(rule.message)

    if field_errors or form_errors:
        return ValidationFailure(raw, field_errors, ', '.join(form_errors))
    return data


def parse_positive_int(value: Any) -> Optional[int]:
    try:
        return _positive_int.validate_python(value)
    except ValidationError:
        return None


def bad_request(fields: Mapping[str, Any], field_errors: Optional[dict] = None, form_error: str = '') -> JSONResponse:
    raw = {key: value for key, value in fields.items() if isinstance(value, str)}
    return ValidationFailure(raw, field_errors or {}, form_error).to_response()
