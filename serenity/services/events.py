"""Per-user change feed.

Services publish a small event after every committed mutation; the
``/events`` route relays them to connected clients, which re-query the
affected views. Two transports:

* ``ChangeFeed``: in-process asyncio queues (single API process, tests).
* ``RedisChangeFeed``: Redis pub/sub, needed once generation runs in an RQ
  worker process.
"""
from __future__ import annotations

import asyncio
import json
from collections import defaultdict
from functools import lru_cache
from typing import Any, AsyncIterator, Dict, Set

import redis.asyncio as aioredis

from serenity.core.config import settings
from serenity.core.logging import logger

Event = Dict[str, Any]

_QUEUE_SIZE = 100


class ChangeFeed:
    def __init__(self) -> None:
        self._subscribers: Dict[str, Set[asyncio.Queue]] = defaultdict(set)

    def subscriber_count(self, user_id: str) -> int:
        return len(self._subscribers.get(user_id, ()))

    async def publish(self, user_id: str, event: Event) -> None:
        for q in list(self._subscribers.get(user_id, ())):
            if q.full():
                # 느린 구독자: 가장 오래된 이벤트 버림
                q.get_nowait()
            q.put_nowait(event)

    async def listen(self, user_id: str) -> AsyncIterator[Event]:
        q: asyncio.Queue = asyncio.Queue(maxsize=_QUEUE_SIZE)
        self._subscribers[user_id].add(q)
        try:
            while True:
                yield await q.get()
        finally:
            self._subscribers[user_id].discard(q)
            if not self._subscribers[user_id]:
                del self._subscribers[user_id]


class RedisChangeFeed:
    def __init__(self, url: str) -> None:
        self._redis = aioredis.Redis.from_url(url)

    @staticmethod
    def channel(user_id: str) -> str:
        return f"serenity:library:{user_id}"

    async def publish(self, user_id: str, event: Event) -> None:
        await self._redis.publish(self.channel(user_id), json.dumps(event))

    async def listen(self, user_id: str) -> AsyncIterator[Event]:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self.channel(user_id))
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                yield json.loads(message["data"])
        finally:
            await pubsub.unsubscribe(self.channel(user_id))
            await pubsub.aclose()


@lru_cache
def get_change_feed() -> ChangeFeed | RedisChangeFeed:
    if settings.CHANGE_FEED == "redis":
        return RedisChangeFeed(settings.REDIS_URL)
    return ChangeFeed()


async def notify(user_id: str, event_type: str, **payload: Any) -> None:
    """Publish after commit. The mutation already happened, so a feed outage is logged, not raised."""
    event = {"type": event_type, **payload}
    try:
        await get_change_feed().publish(user_id, event)
    except Exception:
        logger.exception(f"[events] publish failed user={user_id} event={event_type}")


def reset_change_feed() -> None:
    """Drop the cached feed; a Redis client is bound to the loop that created it."""
    get_change_feed.cache_clear()
