from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.exceptions import RequestValidationError

from ..schemas import SessionLogin, SessionOut
from ..session import Session, get_session, initials, require_user

router = APIRouter(
    prefix="/api/v1/session",
    tags=["session"],
)


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=SessionOut,
    summary="Log in",
    description=(
        "Store the display name that namespaces every record. Logging in under a "
        "different name switches to that name's records."
    ),
    responses={422: {"description": "Validation error"}},
)
def login(payload: SessionLogin, session: Session = Depends(get_session)) -> SessionOut:
    """Log in under the given display name."""
    try:
        name = session.login(payload.name)
    except ValueError as e:
        raise RequestValidationError(
            [{"type": "value_error", "loc": ("body", "name"), "msg": str(e), "input": payload.name}]
        ) from e
    return SessionOut(name=name, initials=initials(name))


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=SessionOut,
    summary="Current session",
    responses={401: {"description": "Nobody is logged in"}},
)
def current_session(name: str = Depends(require_user)) -> SessionOut:
    """Return the logged-in display name and its initials."""
    return SessionOut(name=name, initials=initials(name))


# PUBLIC_INTERFACE
@router.delete(
    "/",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Log out",
    description="Forget the display name. Stored records are kept.",
)
def logout(session: Session = Depends(get_session)) -> None:
    """Log out the current user."""
    if session.current_user() is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication Required")
    session.logout()
    return None
