from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field, ValidationError, create_model

from ..entities import ALL_ENTITIES, EntitySpec
from ..repositories import EntityRepository, ListQuery, get_entity_repository
from ..session import require_user
from ..storage import KeyValueStore, get_store
from ..utils import list_envelope


def _envelope_model(spec: EntitySpec) -> type:
    """
    Build the list response model for an entity: items, total, the entity's
    sections and, where defined, a status label per record id.
    """
    fields: Dict[str, Any] = {
        "items": (List[spec.model], Field(..., description="Records matching the query, in display order")),
        "total": (int, Field(..., description="Number of records matching the query")),
    }
    for name in spec.section_names:
        fields[name] = (Optional[List[spec.model]], Field(default=None, description=f"'{name}' section"))
    if spec.status_label is not None:
        fields["labels"] = (
            Optional[Dict[str, str]],
            Field(default=None, description="Display label keyed by record id"),
        )
    return create_model(f"{spec.model.__name__}List", __base__=BaseModel, **fields)


def _as_request_error(e: ValidationError) -> RequestValidationError:
    return RequestValidationError(e.errors(include_url=False))


# PUBLIC_INTERFACE
def build_router(spec: EntitySpec) -> APIRouter:
    """
    Return a router exposing CRUD operations for one entity under /api/v1/<slug>.
    Every route requires a logged-in user; records are read from and written
    to that user's storage key.
    """
    router = APIRouter(
        prefix=f"/api/v1/{spec.slug}",
        tags=[spec.slug],
    )
    not_found = f"{spec.label} not found"
    Envelope = _envelope_model(spec)
    Record = spec.model
    CreatePayload = spec.create_schema
    UpdatePayload = spec.update_schema

    def _get_repo(
        user: str = Depends(require_user),
        store: KeyValueStore = Depends(get_store),
    ) -> EntityRepository:
        """
        Dependency wrapper binding the repository to the logged-in user.
        """
        return get_entity_repository(store, user, spec)

    # PUBLIC_INTERFACE
    @router.get(
        "/",
        response_model=Envelope,
        response_model_exclude_none=True,
        summary=f"List {spec.slug}",
        description=(
            f"List {spec.slug} in display order.\n\n"
            "Query parameters:\n"
            "- q: case-insensitive search text\n"
            "- completed: filter by completion status (ignored for entities without one)"
        ),
    )
    def list_records(
        q: Optional[str] = Query(None, description="Search text"),
        completed: Optional[bool] = Query(None, description="Filter by completion status"),
        repo: EntityRepository = Depends(_get_repo),
    ):
        """List the user's records in display order, with sections and labels."""
        items = repo.list(ListQuery(completed=completed, search=q.strip() if q else None))
        sections = spec.sections(items) if spec.sections else {}
        envelope = list_envelope(items, **sections)
        if spec.status_label is not None:
            envelope["labels"] = {r.id: spec.status_label(r) for r in items}
        return envelope

    # PUBLIC_INTERFACE
    @router.post(
        "/",
        response_model=Record,
        response_model_exclude_none=True,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create {spec.label.lower()}",
        responses={
            201: {"description": f"{spec.label} created"},
            422: {"description": "Validation error"},
        },
    )
    def create_record(payload: CreatePayload, repo: EntityRepository = Depends(_get_repo)):
        """Create a record with a generated id."""
        return repo.create(payload)

    # PUBLIC_INTERFACE
    @router.get(
        "/{item_id}",
        response_model=Record,
        response_model_exclude_none=True,
        summary=f"Get {spec.label.lower()}",
        responses={404: {"description": not_found}},
    )
    def get_record(item_id: str, repo: EntityRepository = Depends(_get_repo)):
        """Fetch one record by id."""
        item = repo.get(item_id)
        if item is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return item

    # PUBLIC_INTERFACE
    @router.put(
        "/{item_id}",
        response_model=Record,
        response_model_exclude_none=True,
        summary=f"Replace {spec.label.lower()}",
        description="Replace every field of a record. Omitted optional fields are cleared.",
        responses={404: {"description": not_found}},
    )
    def replace_record(item_id: str, payload: CreatePayload, repo: EntityRepository = Depends(_get_repo)):
        """Replace a record, keeping its id."""
        try:
            updated = repo.replace(item_id, payload)
        except ValidationError as e:
            raise _as_request_error(e) from e
        if updated is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return updated

    # PUBLIC_INTERFACE
    @router.patch(
        "/{item_id}",
        response_model=Record,
        response_model_exclude_none=True,
        summary=f"Update {spec.label.lower()}",
        description="Partially update a record. Explicit nulls clear optional fields.",
        responses={404: {"description": not_found}},
    )
    def update_record(item_id: str, payload: UpdatePayload, repo: EntityRepository = Depends(_get_repo)):
        """Apply the fields present in the payload to a record."""
        try:
            updated = repo.update(item_id, payload)
        except ValidationError as e:
            raise _as_request_error(e) from e
        if updated is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return updated

    # PUBLIC_INTERFACE
    @router.delete(
        "/{item_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary=f"Delete {spec.label.lower()}",
        responses={
            204: {"description": f"{spec.label} deleted"},
            404: {"description": not_found},
        },
    )
    def delete_record(item_id: str, repo: EntityRepository = Depends(_get_repo)) -> None:
        """Delete a record by id."""
        if not repo.delete(item_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return None

    if spec.toggle is not None:

        # PUBLIC_INTERFACE
        @router.post(
            "/{item_id}/toggle",
            response_model=Record,
            response_model_exclude_none=True,
            summary=f"Toggle {spec.label.lower()} completion",
            responses={404: {"description": not_found}},
        )
        def toggle_record(item_id: str, repo: EntityRepository = Depends(_get_repo)):
            """Flip a record's completion state."""
            try:
                updated = repo.toggle(item_id)
            except ValidationError as e:
                raise _as_request_error(e) from e
            if updated is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
            return updated

    return router


routers: List[APIRouter] = [build_router(spec) for spec in ALL_ENTITIES]
