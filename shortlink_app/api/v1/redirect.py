from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from shortlink_app.dependencies import get_link_service
from shortlink_app.services.link_service import LinkService

router = APIRouter(tags=["redirect"])


@router.get("/{link_id}")
async def redirect_to_target_url(
    link_id: str,
    link_service: LinkService = Depends(get_link_service),
):
    """
    Redirect to the original URL.

    Uses the cache-aside read, so a cache hit never touches the database.
    Missing ids answer 404 and expired ones 410 through the error handlers.
    """
    link = await link_service.get_link(link_id)
    return RedirectResponse(url=link.target_url, status_code=status.HTTP_302_FOUND)
