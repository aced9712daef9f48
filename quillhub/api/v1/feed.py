"""Global (cross-tenant) feed."""

from fastapi import APIRouter, Query

from quillhub.api.deps import Feed
from quillhub.models.feed_item import FeedItemRead

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("", response_model=list[FeedItemRead])
async def global_feed(
    feed: Feed,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
) -> list[FeedItemRead]:
    return [FeedItemRead.model_validate(item) for item in await feed.latest(skip, limit)]
