from fastapi import APIRouter, Depends, status

from ...config import settings
from ...dependencies import get_creator, get_current_user
from ...redis import redis_client
from ...schemas import ShortLinkCreate, ShortLinkInput, ShortLinkResponse, User
from ...services.creator import ShortLinkCreator
from ...services.rate_limiter import RateLimiter

router = APIRouter()

create_rate_limit = RateLimiter(
    redis_client,
    requests=settings.CREATE_RATE_LIMIT,
    window=settings.CREATE_RATE_WINDOW_SECONDS,
)

@router.post("/links", response_model=ShortLinkResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(create_rate_limit)])
async def create_short_link(
    link_in: ShortLinkCreate,
    user: User = Depends(get_current_user),
    creator: ShortLinkCreator = Depends(get_creator),
):
    link_input = ShortLinkInput(
        long_link=link_in.long_link,
        custom_alias=link_in.custom_alias,
        expire_at=link_in.expire_at,
    )
    short_link = await creator.create_short_link(link_input, user, link_in.is_public)

    return ShortLinkResponse(
        alias=short_link.alias,
        short_link=f"{settings.BASE_URL.rstrip('/')}/{short_link.alias}",
        long_link=short_link.long_link,
        created_at=short_link.created_at,
        expire_at=short_link.expire_at,
    )
