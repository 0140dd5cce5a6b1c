"""Plugin metadata validation.

Validation is split in two so the schema engine stays replaceable:

* :class:`SchemaValidator` -- the engine seam. ``validate(data, schema)``
  returns the completed data or raises
  :class:`~plughost.exceptions.ValidationError`.
* :class:`MetadataValidator` -- applies the fixed
  :class:`~plughost.models.PluginMetadata` schema to whatever a plugin
  passed to ``register``.

The default engine, :class:`PydanticSchemaValidator`, treats the schema as
a pydantic model class.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Protocol

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from plughost.exceptions import ValidationError
from plughost.models import PluginMetadata


class SchemaValidator(Protocol):
    """Anything able to check *data* against *schema* and fill its defaults."""

    def validate(self, data: Any, schema: Any) -> Any:
        ...


class PydanticSchemaValidator:
    """:class:`SchemaValidator` whose schemas are pydantic model classes."""

    def validate(self, data: Any, schema: type[BaseModel]) -> BaseModel:
        """Validate *data* against *schema*.

        Raises:
            ValidationError: With the pydantic error list attached as
                ``errors`` when *data* does not fit.
        """
        try:
            return schema.model_validate(data)
        except PydanticValidationError as exc:
            errors = exc.errors(include_url=False, include_context=False)
            raise ValidationError(_summarise(data, errors), errors=errors) from exc


def _summarise(data: Any, errors: list[dict[str, Any]]) -> str:
    name = data.get("name") if isinstance(data, Mapping) else None
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
        for err in errors
    )
    subject = f"plugin '{name}'" if isinstance(name, str) else "plugin"
    return f"Invalid metadata for {subject}: {problems}"


class MetadataValidator:
    """Validates plugin metadata against the fixed metadata schema.

    Args:
        engine: Schema engine to delegate to. Defaults to
            :class:`PydanticSchemaValidator`.
    """

    def __init__(self, engine: Optional[SchemaValidator] = None) -> None:
        self._engine = engine or PydanticSchemaValidator()

    def validate(self, raw: Any) -> PluginMetadata:
        """Return completed :class:`PluginMetadata` for *raw*.

        Already-validated metadata is returned unchanged. Anything else must
        be a mapping.

        Raises:
            ValidationError: If *raw* is not a mapping, ``name`` is missing
                or malformed, or a field has the wrong type.
        """
        if isinstance(raw, PluginMetadata):
            return raw
        if not isinstance(raw, Mapping):
            raise ValidationError(
                f"Plugin metadata must be a mapping, got {type(raw).__name__}"
            )
        return self._engine.validate(dict(raw), PluginMetadata)
