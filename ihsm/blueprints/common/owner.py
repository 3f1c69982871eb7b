"""Owner scoping for manager-facing queries.

Every record a manager creates carries their user id as ``owner_id``;
reads through these helpers never cross that boundary.
"""

from __future__ import annotations

from typing import Type, TypeVar

from flask import abort
from flask_login import current_user
from sqlalchemy.orm import Query

from ihsm.extensions import db

Model = TypeVar("Model", bound=db.Model)


def owner_query(model: Type[Model]) -> Query:
    """Return a query for the signed-in manager's records of ``model``."""

    if not current_user.is_authenticated:
        raise RuntimeError("Owner context requires an authenticated user")
    return model.query.filter_by(owner_id=current_user.id)


def get_owned_or_404(model: Type[Model], object_id: str) -> Model:
    """Fetch one of the manager's own records or answer 404."""

    instance = owner_query(model).filter_by(id=object_id).first()
    if instance is None:
        abort(404, description=f"{model.__name__} not found")
    return instance


def get_or_404(model: Type[Model], object_id: str) -> Model:
    """Fetch any record by id; ownership is checked by the service that acts on it."""

    instance = db.session.get(model, object_id)
    if instance is None:
        abort(404, description=f"{model.__name__} not found")
    return instance


__all__ = ["owner_query", "get_owned_or_404", "get_or_404"]
