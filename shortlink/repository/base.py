"""Storage contracts consumed by the allocation engine.

The alias is the sole identity key of a short link. Implementations must
reject a second insert of the same alias with AliasExistError; any other
failure propagates unmodified.
"""

from abc import ABC, abstractmethod

from ..schemas import ShortLink, User


class ShortLinkRepository(ABC):
    @abstractmethod
    async def is_alias_exist(self, alias: str) -> bool:
        pass

    @abstractmethod
    async def create_short_link(self, short_link: ShortLink) -> None:
        pass


class UserShortLinkRepository(ABC):
    @abstractmethod
    async def create_relation(self, user: User, short_link: ShortLink) -> None:
        pass
