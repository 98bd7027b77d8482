import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..errors import AliasExistError
from ..models import ShortLinkRecord, UserShortLinkRecord
from ..schemas import ShortLink, User
from .base import ShortLinkRepository, UserShortLinkRepository

logger = logging.getLogger(__name__)


class ShortLinkSQL(ShortLinkRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def is_alias_exist(self, alias: str) -> bool:
        async with self.session_factory() as db:
            result = await db.execute(
                select(ShortLinkRecord.alias).where(ShortLinkRecord.alias == alias)
            )
            return result.scalar_one_or_none() is not None

    async def create_short_link(self, short_link: ShortLink) -> None:
        record = ShortLinkRecord(
            alias=short_link.alias,
            long_link=short_link.long_link,
            created_at=short_link.created_at,
            expire_at=short_link.expire_at,
        )
        async with self.session_factory() as db:
            db.add(record)
            try:
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                # Lost the race between the existence check and the insert
                logger.info(f"Duplicate alias rejected by storage: {short_link.alias}")
                raise AliasExistError(short_link.alias) from e

    async def get_short_link_by_alias(self, alias: str) -> Optional[ShortLink]:
        async with self.session_factory() as db:
            result = await db.execute(select(ShortLinkRecord).where(ShortLinkRecord.alias == alias))
            record = result.scalar_one_or_none()
        if record is None:
            return None
        return ShortLink(
            long_link=record.long_link,
            alias=record.alias,
            created_at=record.created_at,
            expire_at=record.expire_at,
        )


class UserShortLinkSQL(UserShortLinkRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def create_relation(self, user: User, short_link: ShortLink) -> None:
        async with self.session_factory() as db:
            db.add(UserShortLinkRecord(user_id=user.id, short_link_alias=short_link.alias))
            await db.commit()

    async def find_orphaned_aliases(self) -> List[str]:
        """Aliases persisted without an owner, left behind by a failed relation insert."""
        stmt = (
            select(ShortLinkRecord.alias)
            .outerjoin(UserShortLinkRecord, UserShortLinkRecord.short_link_alias == ShortLinkRecord.alias)
            .where(UserShortLinkRecord.id.is_(None))
            .order_by(ShortLinkRecord.alias)
        )
        async with self.session_factory() as db:
            result = await db.execute(stmt)
            return list(result.scalars().all())
