"""Tool and schema translation into the Gemini schema dialect.

Parameters arrive in one of two shapes: a ``StructuredSchema`` tree, which is
translated recursively, or a generic JSON-schema-like mapping, which is read
one level deep (top-level fields plus each property's ``type`` and
``description``). Both shapes produce ``google.genai.types.Schema``.

Unknown type names map to ``Type.TYPE_UNSPECIFIED`` instead of failing.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from google.genai import types

from chatbridge.errors import TranslationError
from chatbridge.schema import StructuredSchema
from chatbridge.types import Tool

_SCHEMA_TYPES: dict[str, types.Type] = {
    "object": types.Type.OBJECT,
    "string": types.Type.STRING,
    "number": types.Type.NUMBER,
    "integer": types.Type.INTEGER,
    "boolean": types.Type.BOOLEAN,
    "array": types.Type.ARRAY,
}


def convert_schema_type(name: str) -> types.Type:
    """Map a JSON schema type name onto the closed Gemini type enum."""
    return _SCHEMA_TYPES.get(name, types.Type.TYPE_UNSPECIFIED)


def _prefixed(prefix: str, exc: TranslationError) -> TranslationError:
    return TranslationError(f"{prefix}: {exc}", hint=exc.hint)


def convert_schema(schema: StructuredSchema | Mapping[str, Any]) -> types.Schema:
    """Translate either accepted parameter shape into a Gemini schema."""
    if isinstance(schema, StructuredSchema):
        return _convert_structured(schema)
    if isinstance(schema, Mapping):
        return _convert_mapping(schema)
    raise TranslationError(
        f"unsupported type {type(schema).__name__} of parameters",
        hint="Pass a StructuredSchema or a dict with 'type' and 'properties'.",
    )


def _convert_structured(node: StructuredSchema) -> types.Schema:
    properties: dict[str, types.Schema] | None = None
    if node.properties is not None:
        properties = {
            name: _convert_structured(prop) for name, prop in node.properties.items()
        }

    items: types.Schema | None = None
    if node.type == "array" and node.items is not None:
        items = _convert_structured(node.items)

    return types.Schema(
        type=convert_schema_type(node.type),
        description=node.description or None,
        required=list(node.required) or None,
        properties=properties,
        items=items,
    )


def _read_str(params: Mapping[str, Any], key: str) -> str | None:
    """Return ``params[key]`` when present; it must be a string."""
    if key not in params:
        return None
    value = params[key]
    if not isinstance(value, str):
        raise TranslationError(
            f"expected string for {key}, got {type(value).__name__}"
        )
    return value


def _read_required(params: Mapping[str, Any]) -> list[str] | None:
    if "required" not in params:
        return None
    required = params["required"]
    if isinstance(required, (str, bytes)) or not isinstance(required, Sequence):
        raise TranslationError("expected a list of strings for required")
    names: list[str] = []
    for item in required:
        if not isinstance(item, str):
            raise TranslationError(
                f"expected string for required, got {type(item).__name__}"
            )
        names.append(item)
    return names or None


def _convert_property(value: Mapping[str, Any]) -> types.Schema:
    type_name = _read_str(value, "type")
    return types.Schema(
        type=convert_schema_type(type_name or ""),
        description=_read_str(value, "description") or None,
    )


def _convert_mapping(params: Mapping[str, Any]) -> types.Schema:
    type_name = _read_str(params, "type")
    description = _read_str(params, "description")

    raw_properties = params.get("properties")
    if not isinstance(raw_properties, Mapping):
        raise TranslationError(
            "expected to find a map of properties",
            hint="Object schemas must declare 'properties' explicitly, even if empty.",
        )

    properties: dict[str, types.Schema] = {}
    for name, value in raw_properties.items():
        if not isinstance(value, Mapping):
            raise TranslationError(f"property [{name}]: expect to find a value map")
        try:
            properties[name] = _convert_property(value)
        except TranslationError as e:
            raise _prefixed(f"property [{name}]", e) from e

    return types.Schema(
        type=convert_schema_type(type_name or ""),
        description=description or None,
        required=_read_required(params),
        properties=properties,
    )


def convert_tools(tools: Sequence[Tool] | None) -> list[types.Tool]:
    """Translate tool declarations, one Gemini tool per function."""
    converted: list[types.Tool] = []
    for i, tool in enumerate(tools or ()):
        if tool.type != "function":
            raise TranslationError(
                f"tool [{i}]: unsupported type {tool.type!r}, want 'function'"
            )
        fn = tool.function
        if fn is None:
            raise TranslationError(f"tool [{i}]: missing function definition")

        parameters: types.Schema | None = None
        if fn.parameters is not None:
            try:
                parameters = convert_schema(fn.parameters)
            except TranslationError as e:
                raise _prefixed(f"tool [{i}]", e) from e

        converted.append(
            types.Tool(
                function_declarations=[
                    types.FunctionDeclaration(
                        name=fn.name,
                        description=fn.description or None,
                        parameters=parameters,
                    )
                ]
            )
        )
    return converted
