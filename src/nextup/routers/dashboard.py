from fastapi import APIRouter, Depends

from ..dashboard import build_dashboard
from ..schemas import DashboardOut
from ..session import require_user
from ..storage import KeyValueStore, get_store

router = APIRouter(
    prefix="/api/v1/dashboard",
    tags=["dashboard"],
)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=DashboardOut,
    summary="Dashboard overview",
    description="Counts of upcoming and active records for the logged-in user.",
    responses={401: {"description": "Nobody is logged in"}},
)
def get_dashboard(
    name: str = Depends(require_user),
    store: KeyValueStore = Depends(get_store),
) -> DashboardOut:
    """Return the overview tiles for the logged-in user."""
    return build_dashboard(store, name)
