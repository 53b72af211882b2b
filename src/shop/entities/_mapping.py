"""Row-to-entity mapping.

Rows come back from the stores either as SQLModel table instances, as
SQLAlchemy ``Row`` objects from textual queries, or as plain mappings in
tests. All three are validated strictly against the entity's declared
fields: a missing column or a value of the wrong type (``"7"`` for an int
id) raises ``MappingFailed``. Child collections are never taken from a row;
the stores attach them after their own queries.
"""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from src.shop.core.errors import MappingFailed

E = TypeVar("E", bound=BaseModel)


def _child_fields(entity_type: type[BaseModel]) -> set[str]:
    # collections the stores fill in, e.g. Product.assets, Category.children
    return {
        name
        for name, field in entity_type.model_fields.items()
        if field.default_factory is list
    }


def _row_values(entity_type: type[BaseModel], row: Any) -> dict[str, Any]:
    if isinstance(row, Mapping):
        return dict(row)
    mapping = getattr(row, "_mapping", None)
    if mapping is not None:
        return dict(mapping)
    return {
        name: getattr(row, name)
        for name in entity_type.model_fields
        if hasattr(row, name)
    }


def map_row(entity_type: type[E], row: Any) -> E:
    """Convert one relational row into ``entity_type``."""
    values = _row_values(entity_type, row)
    for name in _child_fields(entity_type):
        values.pop(name, None)

    try:
        return entity_type.model_validate(values, strict=True)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise MappingFailed(
            f"Result mapping to {entity_type.__name__} failed ({problems})"
        ) from e
