"""Short link alias allocation.

ShortLinkCreator validates a long link, screens it for risk, settles on an
alias (caller chosen or generated) and persists the short link followed by
its ownership relation. Every failure is terminal for the call; nothing is
retried here.

The two inserts are not atomic. If the relation insert fails after the short
link insert succeeded, the short link stays in storage without an owner and
the relation error is raised to the caller unchanged. Operators reconcile
such orphans out of band (see UserShortLinkSQL.find_orphaned_aliases).

The existence check before insert does not guarantee uniqueness under
concurrency; the repository's duplicate rejection (AliasExistError) does.
"""

import logging
from datetime import timezone
from typing import NamedTuple, Optional

from ..errors import AliasExistError, InvalidCustomAliasError, InvalidLongLinkError, MaliciousLongLinkError
from ..observability import ORPHANED_SHORT_LINKS_TOTAL, SHORT_LINK_REJECTIONS_TOTAL, SHORT_LINKS_CREATED_TOTAL
from ..repository.base import ShortLinkRepository, UserShortLinkRepository
from ..schemas import ShortLink, ShortLinkInput, User
from .keygen import KeyGenerator
from .risk import RiskDetector
from .timer import Clock
from .validator import CustomAliasValidator, LongLinkValidator

logger = logging.getLogger(__name__)


class PersistResult(NamedTuple):
    short_link: ShortLink
    relation_error: Optional[Exception] = None

    @property
    def is_orphaned(self) -> bool:
        return self.relation_error is not None


class ShortLinkCreator:
    def __init__(
        self,
        short_link_repo: ShortLinkRepository,
        user_short_link_repo: UserShortLinkRepository,
        key_gen: KeyGenerator,
        long_link_validator: LongLinkValidator,
        alias_validator: CustomAliasValidator,
        clock: Clock,
        risk_detector: RiskDetector,
    ):
        self.short_link_repo = short_link_repo
        self.user_short_link_repo = user_short_link_repo
        self.key_gen = key_gen
        self.long_link_validator = long_link_validator
        self.alias_validator = alias_validator
        self.clock = clock
        self.risk_detector = risk_detector

    async def create_short_link(self, link_input: ShortLinkInput, user: User, is_public: bool = False) -> ShortLink:
        """Persist a new short link under a custom or generated alias, owned by `user`.

        `is_public` is reserved for public links and currently has no effect.

        Raises:
            InvalidLongLinkError, MaliciousLongLinkError, InvalidCustomAliasError,
            AliasExistError, KeyGenerationError, RiskDetectionError, or the
            repositories' own errors unmodified.
        """
        long_link = link_input.get_long_link("")
        is_valid, violation = self.long_link_validator.is_valid(long_link)
        if not is_valid:
            SHORT_LINK_REJECTIONS_TOTAL.labels(reason="invalid_long_link").inc()
            raise InvalidLongLinkError(long_link, violation)

        if await self.risk_detector.is_url_malicious(long_link):
            SHORT_LINK_REJECTIONS_TOTAL.labels(reason="malicious_long_link").inc()
            logger.warning(
                f"Rejected malicious long link: {long_link}",
                extra={"event": "malicious_long_link", "user_id": user.id},
            )
            raise MaliciousLongLinkError(long_link)

        alias = link_input.get_custom_alias("")
        is_valid, violation = self.alias_validator.is_valid(alias)
        if not is_valid:
            SHORT_LINK_REJECTIONS_TOTAL.labels(reason="invalid_custom_alias").inc()
            raise InvalidCustomAliasError(alias, violation)

        if alias == "":
            alias = await self.key_gen.new_key()

        short_link = ShortLink(long_link=long_link, alias=alias, expire_at=link_input.expire_at)

        if await self.short_link_repo.is_alias_exist(alias):
            SHORT_LINK_REJECTIONS_TOTAL.labels(reason="alias_exist").inc()
            raise AliasExistError(alias)

        short_link.created_at = self.clock.now().astimezone(timezone.utc)

        result = await self._persist(short_link, user)
        if result.is_orphaned:
            ORPHANED_SHORT_LINKS_TOTAL.inc()
            logger.error(
                f"Short link {alias} persisted without owner {user.id}: {result.relation_error}",
                extra={"event": "orphaned_short_link", "alias": alias, "user_id": user.id},
            )
            raise result.relation_error

        SHORT_LINKS_CREATED_TOTAL.inc()
        logger.info(f"Created short link: {alias} -> {long_link}", extra={"alias": alias})
        return result.short_link

    async def _persist(self, short_link: ShortLink, user: User) -> PersistResult:
        # A failed short link insert raises before anything is written
        await self.short_link_repo.create_short_link(short_link)
        try:
            await self.user_short_link_repo.create_relation(user, short_link)
        except Exception as e:
            return PersistResult(short_link, e)
        return PersistResult(short_link)
