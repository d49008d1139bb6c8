"""
Safe / Token 信息提供者

从 Safe Transaction Service 获取 Token 元数据与 Safe 当前状态，可选 Redis 缓存。
"""
from __future__ import annotations

import time
from enum import Enum
from typing import Any, Callable

import httpx
from eth_utils import to_checksum_address
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from safe_tx_gateway.app_logging import get_logger
from safe_tx_gateway.storage import RedisCache

logger = get_logger(__name__)


class InfoProviderError(Exception):
    """信息获取错误"""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def transient(self) -> bool:
        return self.status_code is None or self.status_code >= 500


class TokenType(str, Enum):
    ERC20 = "ERC20"
    ERC721 = "ERC721"
    OTHER = "OTHER"


class TokenInfo(BaseModel):
    """Token 元数据"""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore")

    address: str
    name: str
    symbol: str
    decimals: int | None = None
    logo_uri: str | None = None
    token_type: TokenType = Field(default=TokenType.OTHER, alias="type")

    @field_validator("token_type", mode="before")
    @classmethod
    def _unknown_type_is_other(cls, value: Any) -> Any:
        if isinstance(value, TokenType):
            return value
        try:
            return TokenType(str(value).upper())
        except ValueError:
            return TokenType.OTHER


class SafeInfo(BaseModel):
    """Safe 当前链上状态"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    address: str = ""
    nonce: int
    threshold: int
    owners: list[str] = Field(default_factory=list)


class _TokenMemo:
    """进程内 Token 缓存，带 TTL 与容量上限，超出时淘汰最早写入的条目"""

    def __init__(self, ttl_sec: float, max_entries: int, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl_sec
        self._clock = clock
        self._max_entries = max(0, max_entries)
        self._store: dict[str, tuple[TokenInfo, float]] = {}

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str) -> TokenInfo | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        token, expiry = entry
        if self._clock() >= expiry:
            del self._store[key]
            return None
        return token

    def set(self, key: str, token: TokenInfo) -> None:
        if self._max_entries == 0 or self._ttl <= 0:
            return
        self._store.pop(key, None)
        while len(self._store) >= self._max_entries:
            del self._store[next(iter(self._store))]
        self._store[key] = (token, self._clock() + self._ttl)


def _is_transient(error: BaseException) -> bool:
    if isinstance(error, InfoProviderError):
        return error.transient
    return isinstance(error, httpx.TransportError)


def _checksum(address: str) -> str:
    try:
        return to_checksum_address(address)
    except (ValueError, TypeError) as e:
        raise InfoProviderError(f"Invalid address: {address}", status_code=400) from e


class InfoProvider:
    """Safe Transaction Service 信息客户端"""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        cache: RedisCache | None = None,
        token_cache_ttl_seconds: int = 86400,
        safe_cache_ttl_seconds: int = 10,
        token_memo_max_entries: int = 1024,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.cache = cache
        self.token_cache_ttl_seconds = token_cache_ttl_seconds
        self.safe_cache_ttl_seconds = safe_cache_ttl_seconds
        self._transport = transport
        self._tokens = _TokenMemo(token_cache_ttl_seconds, token_memo_max_entries)

    @retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _get(self, path: str) -> dict[str, Any]:
        """发送 GET 请求"""
        url = f"{self.base_url}{path}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(url)

        if response.status_code >= 400:
            raise InfoProviderError(
                f"GET {path} failed with status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise InfoProviderError(f"Invalid JSON from {path}", status_code=response.status_code) from e

    async def token_info(self, address: str) -> TokenInfo:
        """
        获取 Token 元数据

        Args:
            address: Token 合约地址

        Returns:
            TokenInfo

        Raises:
            InfoProviderError: 地址非法、Token 不存在或服务不可用
        """
        checksum_address = _checksum(address)

        token = self._tokens.get(checksum_address)
        if token is not None:
            return token

        payload: dict[str, Any] | None = None
        if self.cache:
            payload = await self.cache.get_token_info(checksum_address)

        if payload is None:
            logger.debug("fetch_token_info", address=checksum_address)
            payload = await self._get(f"/api/v1/tokens/{checksum_address}/")
            if self.cache:
                await self.cache.set_token_info(checksum_address, payload, self.token_cache_ttl_seconds)

        try:
            token = TokenInfo.model_validate(payload)
        except ValidationError as e:
            raise InfoProviderError(f"Invalid token payload for {checksum_address}") from e

        self._tokens.set(checksum_address, token)
        return token

    async def safe_info(self, address: str) -> SafeInfo:
        """获取 Safe 当前 nonce / threshold"""
        checksum_address = _checksum(address)

        payload: dict[str, Any] | None = None
        if self.cache:
            payload = await self.cache.get_safe_info(checksum_address)

        if payload is None:
            logger.debug("fetch_safe_info", address=checksum_address)
            payload = await self._get(f"/api/v1/safes/{checksum_address}/")
            if self.cache:
                await self.cache.set_safe_info(checksum_address, payload, self.safe_cache_ttl_seconds)

        try:
            return SafeInfo.model_validate(payload)
        except ValidationError as e:
            raise InfoProviderError(f"Invalid safe payload for {checksum_address}") from e
