from __future__ import annotations

import json
from typing import Any

import redis.asyncio as redis

from safe_tx_gateway.app_logging import get_logger

logger = get_logger(__name__)


class RedisCache:
    """Redis 缓存客户端"""

    def __init__(self, redis_url: str):
        self.redis_url = redis_url
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        if self._client is None:
            self._client = redis.from_url(self.redis_url, decode_responses=True)
            await self._client.ping()
            logger.info("redis_connected", url=self.redis_url)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(self, key: str) -> Any | None:
        """获取缓存；出错时按未命中处理"""
        if not self._client:
            return None

        try:
            value = await self._client.get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.warning("redis_get_error", key=key, error=str(e))
            return None

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> bool:
        if not self._client:
            return False

        try:
            json_value = json.dumps(value, ensure_ascii=False)
            if ttl_seconds:
                await self._client.setex(key, ttl_seconds, json_value)
            else:
                await self._client.set(key, json_value)
            return True
        except Exception as e:
            logger.warning("redis_set_error", key=key, error=str(e))
            return False

    # Token 信息缓存
    @staticmethod
    def _token_key(address: str) -> str:
        return f"token:{address.lower()}"

    async def get_token_info(self, address: str) -> dict[str, Any] | None:
        return await self.get(self._token_key(address))

    async def set_token_info(self, address: str, token: dict[str, Any], ttl_seconds: int = 86400) -> bool:
        return await self.set(self._token_key(address), token, ttl_seconds)

    # Safe 状态缓存
    @staticmethod
    def _safe_key(address: str) -> str:
        return f"safe:{address.lower()}"

    async def get_safe_info(self, address: str) -> dict[str, Any] | None:
        return await self.get(self._safe_key(address))

    async def set_safe_info(self, address: str, safe_info: dict[str, Any], ttl_seconds: int = 10) -> bool:
        return await self.set(self._safe_key(address), safe_info, ttl_seconds)
