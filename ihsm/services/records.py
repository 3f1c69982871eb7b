"""Owner and foreign-key filtered reads over the record collections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Iterator, Type, TypeVar

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ihsm.extensions import db

Model = TypeVar("Model", bound=db.Model)


@dataclass
class FetchResult(Generic[Model]):
    """Materialized result set of a one-shot read.

    ``error`` is set only when the read itself failed; an empty ``items``
    list with no error means the collection really holds zero records.
    """

    items: list[Model] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def first(self) -> Model | None:
        return self.items[0] if self.items else None

    def __iter__(self) -> Iterator[Model]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


_IRREGULAR_PLURALS = {"match": "matches"}


def _collection_name(model: Type[Model]) -> str:
    table = model.__tablename__
    return _IRREGULAR_PLURALS.get(table, table.replace("_", " ") + "s")


def _run(model: Type[Model], query, order_by: Any = None) -> FetchResult[Model]:
    try:
        if order_by is not None:
            query = query.order_by(*order_by) if isinstance(order_by, (list, tuple)) else query.order_by(order_by)
        return FetchResult(items=list(query.all()))
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to load {model.__tablename__}: {e}")
        return FetchResult(items=[], error=f"Failed to load {_collection_name(model)}")


def fetch_owned(model: Type[Model], owner_id: str, order_by: Any = None) -> FetchResult[Model]:
    """Load every record of ``model`` created by ``owner_id``."""
    return _run(model, model.query.filter_by(owner_id=owner_id), order_by)


def fetch_by_foreign_key(
    model: Type[Model],
    fk_field: str,
    fk_value: Any,
    order_by: Any = None,
) -> FetchResult[Model]:
    """Load every record of ``model`` whose ``fk_field`` equals ``fk_value``."""
    if not hasattr(model, fk_field):
        raise AttributeError(f"{model.__name__} has no field {fk_field!r}")
    return _run(model, model.query.filter(getattr(model, fk_field) == fk_value), order_by)


def fetch_all(model: Type[Model], filters: dict[str, Any] | None = None, order_by: Any = None) -> FetchResult[Model]:
    """Load a whole collection, optionally narrowed by equality filters."""
    query = model.query
    if filters:
        query = query.filter_by(**filters)
    return _run(model, query, order_by)


__all__ = ["FetchResult", "fetch_owned", "fetch_by_foreign_key", "fetch_all"]
