"""Argument schemas and validation for tool calls.

Each tool declares its arguments as a mapping of field name to
:class:`ArgumentField`. :func:`validate` checks a raw argument mapping against
that declaration and returns either :class:`Ok` with the typed, defaulted
arguments or :class:`Invalid` naming every offending field.
"""

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

ArgumentType = Literal["string", "number", "integer", "boolean"]

_PYTHON_TYPES: dict[str, type] = {
    "string": str,
    "number": float,
    "integer": int,
    "boolean": bool,
}


class ArgumentField(BaseModel):
    """Declaration of a single tool argument."""

    model_config = ConfigDict(frozen=True)

    type: ArgumentType = Field(..., description="JSON type of the argument")
    required: bool = Field(default=False, description="Whether callers must supply the argument")
    default: Any = Field(default=None, description="Value substituted when the argument is absent")
    description: str = Field(default="", description="Human-readable description")

    def to_json_schema(self) -> dict[str, Any]:
        """Render the JSON Schema fragment advertised by ``tools/list``."""
        schema: dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.default is not None:
            schema["default"] = self.default
        return schema


class ArgumentSchema:
    """Ordered set of argument declarations, compiled once into a strict model."""

    def __init__(self, fields: dict[str, ArgumentField] | None = None) -> None:
        self.fields: dict[str, ArgumentField] = dict(fields or {})
        self.model = self._build_model()

    def _build_model(self) -> type[BaseModel]:
        definitions: dict[str, Any] = {}
        for name, spec in self.fields.items():
            python_type = _PYTHON_TYPES[spec.type]
            if spec.required:
                definitions[name] = (python_type, ...)
            else:
                definitions[name] = (python_type | None, spec.default)
        return create_model(
            "ToolArguments",
            __config__=ConfigDict(strict=True, extra="ignore"),
            **definitions,
        )

    @property
    def required(self) -> list[str]:
        """Names of the required arguments, in declaration order."""
        return [name for name, spec in self.fields.items() if spec.required]

    def to_json_schema(self) -> dict[str, Any]:
        """Render the ``inputSchema`` object for this argument set."""
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {name: spec.to_json_schema() for name, spec in self.fields.items()},
        }
        if self.required:
            schema["required"] = self.required
        return schema


@dataclass(frozen=True)
class FieldError:
    """A single validation problem."""

    field: str
    message: str


@dataclass(frozen=True)
class Ok:
    """Validation succeeded."""

    arguments: dict[str, Any]


@dataclass(frozen=True)
class Invalid:
    """Validation failed."""

    errors: list[FieldError] = field(default_factory=list)

    @property
    def fields(self) -> list[str]:
        return [error.field for error in self.errors]

    @property
    def message(self) -> str:
        details = "; ".join(f"{error.field}: {error.message}" for error in self.errors)
        return f"Invalid arguments: {details}"


ValidationResult = Ok | Invalid


def validate(schema: ArgumentSchema, raw_args: Any) -> ValidationResult:
    """Validate raw call arguments against a tool's argument schema.

    Explicit ``null`` for an optional argument is treated as if the argument
    were absent. Keys the schema does not declare are ignored.

    Args:
        schema: The tool's argument declarations.
        raw_args: The untyped ``arguments`` value from the request.

    Returns:
        Ok with typed, defaulted arguments, or Invalid naming the offending fields.
    """
    if not isinstance(raw_args, dict):
        return Invalid([FieldError("arguments", "Input should be an object")])

    cleaned = {
        key: value
        for key, value in raw_args.items()
        if not (value is None and key in schema.fields and not schema.fields[key].required)
    }

    try:
        parsed = schema.model.model_validate(cleaned)
    except ValidationError as exc:
        return Invalid(
            [
                FieldError(".".join(str(part) for part in error["loc"]) or "arguments", error["msg"])
                for error in exc.errors()
            ]
        )

    return Ok(parsed.model_dump())
