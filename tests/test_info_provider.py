"""
InfoProvider against a mocked transaction service (httpx.MockTransport).
"""

from __future__ import annotations

import asyncio

import httpx
import pytest
from eth_utils import to_checksum_address
from tenacity import wait_none

from factories import NFT, SAFE, TOKEN, make_token
from safe_tx_gateway.providers import InfoProvider, InfoProviderError, TokenType
from safe_tx_gateway.providers.info import _TokenMemo

BASE_URL = "http://tx-service.local"


def _token_payload(token_type: str = "ERC20") -> dict:
    return {
        "type": token_type,
        "address": to_checksum_address(TOKEN),
        "name": "Dai Stablecoin",
        "symbol": "DAI",
        "decimals": 18,
        "logoUri": "https://tokens.example/dai.png",
    }


class Recorder:
    def __init__(self, routes: dict[str, httpx.Response]):
        self.routes = routes
        self.paths: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.paths.append(request.url.path)
        response = self.routes.get(request.url.path)
        if response is None:
            return httpx.Response(404, json={"detail": "Not found."})
        return httpx.Response(response.status_code, json=response.json())


class MemoryCache:
    def __init__(self):
        self.tokens: dict[str, dict] = {}

    async def get_token_info(self, address: str):
        return self.tokens.get(address.lower())

    async def set_token_info(self, address: str, token: dict, ttl_seconds: int = 0) -> bool:
        self.tokens[address.lower()] = token
        return True


def _provider(recorder, cache=None, **kwargs) -> InfoProvider:
    return InfoProvider(base_url=BASE_URL, cache=cache, transport=httpx.MockTransport(recorder), **kwargs)


def test_token_info_is_fetched_and_memoised():
    path = f"/api/v1/tokens/{to_checksum_address(TOKEN)}/"
    recorder = Recorder({path: httpx.Response(200, json=_token_payload())})
    provider = _provider(recorder)

    async def run():
        first = await provider.token_info(TOKEN)
        second = await provider.token_info(TOKEN.upper().replace("0X", "0x"))
        return first, second

    first, second = asyncio.run(run())

    assert first.token_type == TokenType.ERC20
    assert first.logo_uri == "https://tokens.example/dai.png"
    assert second is first
    assert recorder.paths == [path]


def test_unknown_token_type_maps_to_other():
    path = f"/api/v1/tokens/{to_checksum_address(TOKEN)}/"
    recorder = Recorder({path: httpx.Response(200, json=_token_payload("ERC777"))})
    token = asyncio.run(_provider(recorder).token_info(TOKEN))
    assert token.token_type == TokenType.OTHER


def test_missing_token_raises_without_retry():
    recorder = Recorder({})
    with pytest.raises(InfoProviderError) as exc_info:
        asyncio.run(_provider(recorder).token_info(TOKEN))
    assert exc_info.value.status_code == 404
    assert len(recorder.paths) == 1


def test_invalid_address_raises():
    recorder = Recorder({})
    with pytest.raises(InfoProviderError):
        asyncio.run(_provider(recorder).token_info("0x0"))
    assert recorder.paths == []


def test_invalid_token_payload_raises():
    path = f"/api/v1/tokens/{to_checksum_address(TOKEN)}/"
    recorder = Recorder({path: httpx.Response(200, json={"address": TOKEN})})
    with pytest.raises(InfoProviderError):
        asyncio.run(_provider(recorder).token_info(TOKEN))


def test_token_info_uses_cache():
    cache = MemoryCache()
    cache.tokens[to_checksum_address(TOKEN).lower()] = _token_payload("ERC721")
    recorder = Recorder({})

    token = asyncio.run(_provider(recorder, cache=cache).token_info(TOKEN))

    assert token.token_type == TokenType.ERC721
    assert recorder.paths == []


def test_token_info_fills_cache():
    path = f"/api/v1/tokens/{to_checksum_address(TOKEN)}/"
    cache = MemoryCache()
    recorder = Recorder({path: httpx.Response(200, json=_token_payload())})

    asyncio.run(_provider(recorder, cache=cache).token_info(TOKEN))

    assert cache.tokens[TOKEN.lower()]["symbol"] == "DAI"


def test_safe_info():
    path = f"/api/v1/safes/{to_checksum_address(SAFE)}/"
    recorder = Recorder({
        path: httpx.Response(200, json={
            "address": to_checksum_address(SAFE),
            "nonce": 12,
            "threshold": 2,
            "owners": [to_checksum_address(TOKEN)],
            "masterCopy": "0x0000000000000000000000000000000000000001",
        })
    })

    safe_info = asyncio.run(_provider(recorder).safe_info(SAFE))

    assert safe_info.nonce == 12
    assert safe_info.threshold == 2


def test_redis_cache_without_connection_is_a_miss():
    from safe_tx_gateway.storage import RedisCache

    cache = RedisCache("redis://localhost:6379/0")

    async def run():
        stored = await cache.set_token_info(TOKEN, _token_payload())
        return stored, await cache.get_token_info(TOKEN)

    assert asyncio.run(run()) == (False, None)


class Queued:
    """Answers each request with the next queued response."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.paths: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.paths.append(request.url.path)
        return self.responses.pop(0)


@pytest.fixture
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(InfoProvider._get.retry, "wait", wait_none())


def test_erc721_token_without_decimals():
    path = f"/api/v1/tokens/{to_checksum_address(NFT)}/"
    payload = {
        "type": "ERC721",
        "address": to_checksum_address(NFT),
        "name": "CryptoPunks",
        "symbol": "PUNK",
        "decimals": None,
        "logoUri": None,
    }
    recorder = Recorder({path: httpx.Response(200, json=payload)})

    token = asyncio.run(_provider(recorder).token_info(NFT))

    assert token.token_type == TokenType.ERC721
    assert token.decimals is None


def test_server_error_is_retried(no_retry_wait):
    responder = Queued(
        httpx.Response(503, json={"detail": "unavailable"}),
        httpx.Response(200, json=_token_payload()),
    )

    token = asyncio.run(_provider(responder).token_info(TOKEN))

    assert token.symbol == "DAI"
    assert len(responder.paths) == 2


def test_server_error_gives_up_after_three_attempts(no_retry_wait):
    responder = Queued(*(httpx.Response(503, json={"detail": "unavailable"}) for _ in range(3)))

    with pytest.raises(InfoProviderError) as exc_info:
        asyncio.run(_provider(responder).token_info(TOKEN))

    assert exc_info.value.status_code == 503
    assert len(responder.paths) == 3


def test_transport_error_is_retried(no_retry_wait):
    attempts: list[str] = []

    def flaky(request: httpx.Request) -> httpx.Response:
        attempts.append(request.url.path)
        if len(attempts) == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=_token_payload())

    token = asyncio.run(_provider(flaky).token_info(TOKEN))

    assert token.symbol == "DAI"
    assert len(attempts) == 2


def test_token_memo_expires_with_ttl():
    clock = [1000.0]
    memo = _TokenMemo(ttl_sec=60, max_entries=8, clock=lambda: clock[0])
    token = make_token()

    memo.set(TOKEN, token)
    clock[0] += 59
    assert memo.get(TOKEN) is token

    clock[0] += 1
    assert memo.get(TOKEN) is None
    assert len(memo) == 0


def test_token_memo_is_bounded():
    token_path = f"/api/v1/tokens/{to_checksum_address(TOKEN)}/"
    nft_path = f"/api/v1/tokens/{to_checksum_address(NFT)}/"
    recorder = Recorder({
        token_path: httpx.Response(200, json=_token_payload()),
        nft_path: httpx.Response(200, json=_token_payload("ERC721")),
    })
    provider = _provider(recorder, token_memo_max_entries=1)

    async def run():
        await provider.token_info(TOKEN)
        await provider.token_info(NFT)
        await provider.token_info(TOKEN)

    asyncio.run(run())

    assert recorder.paths == [token_path, nft_path, token_path]
    assert len(provider._tokens) == 1
