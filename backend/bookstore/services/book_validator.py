"""
Bookstore Backend — Book Payload Validator
============================================

What:  Validates request bodies against the book JSON Schema documents.
Why:   The checks are data (schemas/book_create.json, schemas/book_update.json),
       so new constraints are added to the schema, not to route code.
How:   A Draft 7 `jsonschema` validator extended with our own implementations
       of `required`, `type`, `format` and `not`. They behave like the stock
       keywords but phrase messages the way API consumers already parse them:

           instance requires property "isbn"
           instance.pages is not of a type(s) integer
           instance.amazon_url does not conform to the "uri" format
           instance is of prohibited type [object Object]

Message order:
    jsonschema evaluates keywords in document order, so every schema lists
    `type`, then `required`, then `properties` (each property: `type` before
    `format`), then `not`. Presence errors therefore always come before
    type and format errors.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Literal, Union

from jsonschema import Draft7Validator, FormatChecker, validators
from jsonschema.exceptions import FormatError
from jsonschema.exceptions import ValidationError as SchemaViolation
from pydantic import BaseModel

logger = logging.getLogger(__name__)

SchemaKind = Literal["create", "update"]

SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"
SCHEMA_FILES: Dict[str, str] = {
    "create": "book_create.json",
    "update": "book_update.json",
}

# Scheme, colon, no whitespace
_URI_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:[^\s]*$")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

# Published wording for a body matching a `not` schema
PROHIBITED_MESSAGE = "is of prohibited type [object Object]"


# ══════════════════════════════════════════════════════════════════════════
# Result types
# ══════════════════════════════════════════════════════════════════════════


class ValidatedBook(BaseModel):
    """Payload accepted by the schema, unchanged."""

    payload: Dict[str, Any]


class ValidationErrors(BaseModel):
    """Ordered, human-readable schema violations."""

    messages: List[str]


ValidationResult = Union[ValidatedBook, ValidationErrors]


# ══════════════════════════════════════════════════════════════════════════
# Keyword implementations
# ══════════════════════════════════════════════════════════════════════════


def _required(validator, required, instance, schema):
    if not validator.is_type(instance, "object"):
        return
    for prop in required:
        if prop not in instance:
            yield SchemaViolation(f'requires property "{prop}"')


def _type(validator, types, instance, schema):
    if isinstance(types, str):
        types = [types]
    if not any(validator.is_type(instance, t) for t in types):
        yield SchemaViolation(f"is not of a type(s) {','.join(types)}")


def _format(validator, format, instance, schema):
    if validator.format_checker is None:
        return
    try:
        validator.format_checker.check(instance, format)
    except FormatError:
        yield SchemaViolation(f'does not conform to the "{format}" format')


def _not(validator, not_schema, instance, schema):
    if validator.evolve(schema=not_schema).is_valid(instance):
        yield SchemaViolation(PROHIBITED_MESSAGE)


BookSchemaValidator = validators.extend(
    Draft7Validator,
    validators={
        "required": _required,
        "type": _type,
        "format": _format,
        "not": _not,
    },
)

format_checker = FormatChecker(formats=())


@format_checker.checks("uri")
def is_uri(instance: object) -> bool:
    # Non-strings are reported by `type`, not by `format`
    if not isinstance(instance, str):
        return True
    return _URI_RE.match(instance) is not None


def instance_path(path: Iterable[Union[str, int]]) -> str:
    """Render a JSON path as `instance.field`, `instance[0]` or `instance["a b"]`."""
    rendered = "instance"
    for part in path:
        if isinstance(part, int):
            rendered += f"[{part}]"
        elif _IDENTIFIER_RE.match(part):
            rendered += f".{part}"
        else:
            rendered += f"[{json.dumps(part)}]"
    return rendered


def format_violation(error: SchemaViolation) -> str:
    return f"{instance_path(error.absolute_path)} {error.message}"


# ══════════════════════════════════════════════════════════════════════════
# Validator
# ══════════════════════════════════════════════════════════════════════════


class BookValidator:
    """
    Validates book payloads for creation and full replacement.

    Schemas are loaded and checked against the Draft 7 meta-schema once,
    when the validator is constructed.
    """

    def __init__(self, schema_dir: Path = SCHEMA_DIR):
        self._validators: Dict[str, Draft7Validator] = {}
        for kind, filename in SCHEMA_FILES.items():
            schema = json.loads((schema_dir / filename).read_text(encoding="utf-8"))
            BookSchemaValidator.check_schema(schema)
            self._validators[kind] = BookSchemaValidator(schema, format_checker=format_checker)

    def validate(self, payload: Any, kind: SchemaKind) -> ValidationResult:
        """
        Check `payload` against the `create` or `update` schema.

        Returns:
            ValidatedBook with the payload unchanged, or ValidationErrors
            listing every violation in evaluation order.

        Raises:
            KeyError: unknown schema kind (a programming error)
        """
        validator = self._validators[kind]
        messages = [format_violation(error) for error in validator.iter_errors(payload)]
        if messages:
            logger.debug("Book payload rejected by %s schema: %s", kind, messages)
            return ValidationErrors(messages=messages)
        return ValidatedBook(payload=payload)


book_validator = BookValidator()
