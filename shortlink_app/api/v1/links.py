from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from shortlink_app.dependencies import get_link_service
from shortlink_app.schemas.link import LinkCreate
from shortlink_app.schemas.response import envelope
from shortlink_app.services.link_service import LinkService

router = APIRouter(prefix="/url-shortener", tags=["url-shortener"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_short_url(
    link_data: LinkCreate,
    ttl: Optional[int] = Query(None, ge=1, description="Lifetime of the link in hours"),
    link_service: LinkService = Depends(get_link_service),
):
    """Create a short URL, optionally expiring after `ttl` hours"""
    link = await link_service.create_link(
        str(link_data.long_url),
        custom_id=link_data.custom_id,
        ttl_hours=ttl,
    )
    return envelope("Short URL created successfully", status.HTTP_201_CREATED, link)


@router.get("/{link_id}")
async def get_short_url(
    link_id: str,
    link_service: LinkService = Depends(get_link_service),
):
    """Get information about a live short URL"""
    link = await link_service.get_link(link_id)
    return envelope("Short URL retrieved successfully", status.HTTP_200_OK, link)


@router.delete("/{link_id}")
async def delete_short_url(
    link_id: str,
    link_service: LinkService = Depends(get_link_service),
):
    """Delete a short URL and its cache entry"""
    await link_service.delete_link(link_id)
    return envelope("Shorten url deleted successfully", status.HTTP_200_OK)
