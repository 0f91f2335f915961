"""Structured tool-parameter schema.

A recursive subset of JSON Schema: enough to describe function parameters.
Unknown JSON Schema keywords (``enum``, ``format``, ...) are accepted and
ignored so documents can be loaded with ``StructuredSchema.model_validate_json``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class StructuredSchema(BaseModel):
    """One schema node.

    ``items`` is only meaningful for ``type="array"`` and ``properties`` only
    for ``type="object"``. Property order is preserved.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str = ""
    description: str = ""
    required: list[str] = Field(default_factory=list)
    properties: dict[str, StructuredSchema] | None = None
    items: StructuredSchema | None = None


StructuredSchema.model_rebuild()
