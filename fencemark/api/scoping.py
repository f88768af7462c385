"""
Organization scoping helpers for resource endpoints.

Every read and write goes through these so the organization filter cannot
be forgotten:

- scoped_query: base query filtered by organization_id
- get_owned_or_404: load by (id, organization_id); missing and foreign rows
  are both 404 so identifiers of other organizations cannot be probed
- require_owned_reference: validate a client-supplied foreign key; missing
  or foreign references are a 400, never a database integrity error
- clear_other_defaults: keep at most one is_default row per organization
"""
from typing import Optional, Type
from fastapi import Response
from sqlalchemy.orm import Session, Query

from fencemark.core.exceptions import ResourceNotFoundError, InvalidInputError
from fencemark.utils.clock import utcnow


def scoped_query(db: Session, model: Type, organization_id: str) -> Query:
    return db.query(model).filter(model.organization_id == organization_id)


def get_owned_or_404(
    db: Session,
    model: Type,
    object_id: str,
    organization_id: str,
    resource_name: Optional[str] = None
):
    obj = scoped_query(db, model, organization_id).filter(model.id == object_id).first()
    if obj is None:
        raise ResourceNotFoundError(resource_name or model.__name__, object_id)
    return obj


def require_owned_reference(
    db: Session,
    model: Type,
    object_id: Optional[str],
    organization_id: str,
    message: str
):
    """
    Return the referenced row, or None when no reference was given.

    Raises InvalidInputError(message) when the id does not resolve inside
    the caller's organization.
    """
    if object_id is None:
        return None
    obj = scoped_query(db, model, organization_id).filter(model.id == object_id).first()
    if obj is None:
        raise InvalidInputError(message)
    return obj


def clear_other_defaults(
    db: Session,
    model: Type,
    organization_id: str,
    keep_id: Optional[str] = None
) -> int:
    """
    Unset is_default on the organization's other rows.

    Runs as an immediate UPDATE inside the request's transaction, before the
    new default is flushed, so the single-default unique index is never
    violated mid-transaction.
    """
    query = scoped_query(db, model, organization_id).filter(model.is_default.is_(True))
    if keep_id is not None:
        query = query.filter(model.id != keep_id)
    return query.update(
        {model.is_default: False, model.updated_at: utcnow()},
        synchronize_session="fetch"
    )


def apply_updates(obj, changes: dict) -> None:
    """
    Copy whitelisted fields onto obj and stamp updated_at.

    An explicit null for a NOT NULL column leaves the stored value as is.
    """
    columns = obj.__table__.columns
    for field, value in changes.items():
        if value is None and field in columns and not columns[field].nullable:
            continue
        setattr(obj, field, value)
    obj.updated_at = utcnow()


def set_location(response: Response, collection: str, object_id: str) -> None:
    response.headers["Location"] = f"/api/{collection}/{object_id}"
