import pytest

from src.infrastructure.services.token_blocklist import RedisTokenBlocklist


@pytest.mark.asyncio
async def test_blocked_jti_is_reported_until_expiry(redis_client):
    blocklist = RedisTokenBlocklist(redis_client)

    await blocklist.block("jti-1", 60)

    assert await blocklist.is_blocked("jti-1") is True
    assert await blocklist.is_blocked("jti-2") is False
    redis_client.advance(61)
    assert await blocklist.is_blocked("jti-1") is False


@pytest.mark.asyncio
async def test_non_positive_ttl_still_blocks_briefly(redis_client):
    blocklist = RedisTokenBlocklist(redis_client)

    await blocklist.block("jti-1", 0)

    assert await redis_client.ttl("blacklist:jti-1") == 1
