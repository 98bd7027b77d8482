import pytest
from datetime import datetime, timedelta, timezone

from shortlink.errors import (
    AliasExistError,
    InvalidCustomAliasError,
    InvalidLongLinkError,
    KeyGenerationError,
    MaliciousLongLinkError,
)
from shortlink.schemas import ShortLinkInput
from shortlink.services.creator import ShortLinkCreator
from shortlink.services.validator import CustomAliasValidator, LongLinkValidator, Violation

from conftest import FIXED_NOW, FixedClock, RecordingShortLinkRepo, SequenceKeyGenerator, StubRiskDetector


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "long_link, violation",
    [
        (None, Violation.EMPTY_LONG_LINK),
        ("", Violation.EMPTY_LONG_LINK),
        ("not a url", Violation.LONG_LINK_NOT_URL),
        ("ftp://example.com/file", Violation.LONG_LINK_NOT_URL),
        ("https://example.com/" + "a" * 300, Violation.LONG_LINK_TOO_LONG),
    ],
)
async def test_invalid_long_link_touches_nothing(creator, user, calls, risk_detector, key_gen, long_link, violation):
    with pytest.raises(InvalidLongLinkError) as exc_info:
        await creator.create_short_link(ShortLinkInput(long_link=long_link), user, False)

    assert exc_info.value.violation == violation
    assert exc_info.value.long_link == (long_link or "")
    assert calls == []
    assert risk_detector.checked == []
    assert key_gen.calls == 0


@pytest.mark.asyncio
async def test_malicious_long_link_is_rejected_before_storage(creator, user, calls, key_gen):
    link_input = ShortLinkInput(long_link="https://malware.example.com/payload", custom_alias="fine")

    with pytest.raises(MaliciousLongLinkError) as exc_info:
        await creator.create_short_link(link_input, user, False)

    assert exc_info.value.long_link == "https://malware.example.com/payload"
    assert calls == []
    assert key_gen.calls == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "alias, violation",
    [
        ("a" * 51, Violation.ALIAS_TOO_LONG),
        ("has#fragment", Violation.HAS_FRAGMENT_CHARACTER),
        ("white space", Violation.ALIAS_INVALID_CHARACTER),
        ("health", Violation.ALIAS_RESERVED),
    ],
)
async def test_invalid_custom_alias(creator, user, calls, alias, violation):
    with pytest.raises(InvalidCustomAliasError) as exc_info:
        await creator.create_short_link(ShortLinkInput(long_link="https://example.com", custom_alias=alias), user, False)

    assert exc_info.value.alias == alias
    assert exc_info.value.violation == violation
    assert calls == []


@pytest.mark.asyncio
async def test_generated_alias_is_persisted_with_owner(creator, user, calls, short_link_repo, user_short_link_repo):
    short_link = await creator.create_short_link(ShortLinkInput(long_link="https://example.com/page"), user, False)

    assert short_link.alias == "abc123"
    assert short_link.long_link == "https://example.com/page"
    assert short_link.created_at == FIXED_NOW
    assert short_link.expire_at is None
    assert calls == ["is_alias_exist", "create_short_link", "create_relation"]
    assert await short_link_repo.get_short_link_by_alias("abc123") == short_link
    assert user_short_link_repo.aliases_for("alpha") == ["abc123"]


@pytest.mark.asyncio
async def test_custom_alias_is_used_without_key_generation(creator, user, key_gen):
    short_link = await creator.create_short_link(
        ShortLinkInput(long_link="https://example.com", custom_alias="launch"), user, True
    )

    assert short_link.alias == "launch"
    assert key_gen.calls == 0


@pytest.mark.asyncio
async def test_existing_custom_alias_is_rejected(creator, user, calls):
    with pytest.raises(AliasExistError) as exc_info:
        await creator.create_short_link(ShortLinkInput(long_link="https://example.com", custom_alias="promo"), user, False)

    assert exc_info.value.alias == "promo"
    assert calls == ["is_alias_exist"]


@pytest.mark.asyncio
async def test_colliding_generated_alias_is_not_regenerated(user, calls, user_short_link_repo):
    key_gen = SequenceKeyGenerator(["promo", "fresh1"])
    creator = ShortLinkCreator(
        short_link_repo=RecordingShortLinkRepo(calls, existing=["promo"]),
        user_short_link_repo=user_short_link_repo,
        key_gen=key_gen,
        long_link_validator=LongLinkValidator(),
        alias_validator=CustomAliasValidator(),
        clock=FixedClock(),
        risk_detector=StubRiskDetector(),
    )

    with pytest.raises(AliasExistError):
        await creator.create_short_link(ShortLinkInput(long_link="https://example.com"), user, False)

    assert key_gen.calls == 1
    assert calls == ["is_alias_exist"]


@pytest.mark.asyncio
async def test_key_generation_failure_propagates(creator, user, calls, key_gen):
    key_gen.keys = []

    with pytest.raises(KeyGenerationError):
        await creator.create_short_link(ShortLinkInput(long_link="https://example.com"), user, False)

    assert calls == []


@pytest.mark.asyncio
async def test_same_long_link_twice_gives_two_short_links(creator, user, short_link_repo):
    link_input = ShortLinkInput(long_link="https://example.com/same")

    first = await creator.create_short_link(link_input, user, False)
    second = await creator.create_short_link(link_input, user, False)

    assert first.alias == "abc123"
    assert second.alias == "def456"
    assert await short_link_repo.get_short_link_by_alias("abc123") is not None
    assert await short_link_repo.get_short_link_by_alias("def456") is not None


@pytest.mark.asyncio
async def test_relation_failure_leaves_orphaned_short_link(creator, user, short_link_repo, user_short_link_repo, calls):
    failure = RuntimeError("relation store is down")
    user_short_link_repo.error = failure

    with pytest.raises(RuntimeError) as exc_info:
        await creator.create_short_link(ShortLinkInput(long_link="https://example.com"), user, False)

    assert exc_info.value is failure
    assert calls == ["is_alias_exist", "create_short_link", "create_relation"]
    orphan = await short_link_repo.get_short_link_by_alias("abc123")
    assert orphan is not None
    assert orphan.created_at == FIXED_NOW


@pytest.mark.asyncio
async def test_short_link_insert_failure_skips_relation(creator, user, short_link_repo, calls):
    async def broken_insert(short_link):
        calls.append("create_short_link")
        raise ConnectionError("database unavailable")

    short_link_repo.create_short_link = broken_insert

    with pytest.raises(ConnectionError):
        await creator.create_short_link(ShortLinkInput(long_link="https://example.com"), user, False)

    assert calls == ["is_alias_exist", "create_short_link"]


@pytest.mark.asyncio
async def test_expiration_is_carried_through(creator, user, short_link_repo):
    expire_at = datetime(2030, 1, 1, tzinfo=timezone.utc)

    short_link = await creator.create_short_link(
        ShortLinkInput(long_link="https://example.com", expire_at=expire_at), user, False
    )

    assert short_link.expire_at == expire_at
    stored = await short_link_repo.get_short_link_by_alias(short_link.alias)
    assert stored.expire_at == expire_at


@pytest.mark.asyncio
async def test_created_at_is_normalized_to_utc(user, calls, user_short_link_repo):
    offset = timezone(timedelta(hours=-5))
    creator = ShortLinkCreator(
        short_link_repo=RecordingShortLinkRepo(calls),
        user_short_link_repo=user_short_link_repo,
        key_gen=SequenceKeyGenerator(["tz1234"]),
        long_link_validator=LongLinkValidator(),
        alias_validator=CustomAliasValidator(),
        clock=FixedClock(datetime(2024, 3, 1, 7, 30, tzinfo=offset)),
        risk_detector=StubRiskDetector(),
    )

    short_link = await creator.create_short_link(ShortLinkInput(long_link="https://example.com"), user, False)

    assert short_link.created_at.utcoffset() == timedelta(0)
    assert short_link.created_at == FIXED_NOW
