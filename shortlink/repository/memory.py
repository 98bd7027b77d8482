from typing import Dict, List, Optional, Tuple

from ..errors import AliasExistError
from ..schemas import ShortLink, User
from .base import ShortLinkRepository, UserShortLinkRepository


class ShortLinkMemory(ShortLinkRepository):
    def __init__(self):
        self.short_links: Dict[str, ShortLink] = {}

    async def is_alias_exist(self, alias: str) -> bool:
        return alias in self.short_links

    async def create_short_link(self, short_link: ShortLink) -> None:
        if short_link.alias in self.short_links:
            raise AliasExistError(short_link.alias)
        self.short_links[short_link.alias] = short_link.model_copy()

    async def get_short_link_by_alias(self, alias: str) -> Optional[ShortLink]:
        return self.short_links.get(alias)


class UserShortLinkMemory(UserShortLinkRepository):
    def __init__(self):
        self.relations: List[Tuple[str, str]] = []

    async def create_relation(self, user: User, short_link: ShortLink) -> None:
        self.relations.append((user.id, short_link.alias))

    def aliases_for(self, user_id: str) -> List[str]:
        return [alias for owner, alias in self.relations if owner == user_id]
