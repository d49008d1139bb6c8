from __future__ import annotations

import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from safe_tx_gateway import __version__
from safe_tx_gateway.api import router
from safe_tx_gateway.app_logging import configure_logging, get_logger
from safe_tx_gateway.config import Settings, get_settings
from safe_tx_gateway.enricher import TransactionEnricher
from safe_tx_gateway.providers import InfoProvider
from safe_tx_gateway.storage import RedisCache

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    settings: Settings = get_settings()

    configure_logging(settings.log_level, settings.log_format)
    logger.info("app_starting", env=settings.app_env, port=settings.port)

    # 初始化 Redis 缓存
    cache: RedisCache | None = None
    if settings.redis_url:
        try:
            cache = RedisCache(settings.redis_url)
            await cache.connect()
        except Exception as e:
            logger.warning("redis_connect_error", error=str(e))
            cache = None
    app.state.cache = cache

    # 测试时可预先注入
    if getattr(app.state, "info_provider", None) is None:
        app.state.info_provider = InfoProvider(
            base_url=settings.transaction_service_url,
            timeout=settings.info_request_timeout_s,
            cache=cache,
            token_cache_ttl_seconds=settings.token_info_cache_ttl_seconds,
            safe_cache_ttl_seconds=settings.safe_info_cache_ttl_seconds,
            token_memo_max_entries=settings.token_memo_max_entries,
        )
        logger.info("info_provider_initialized", base_url=settings.transaction_service_url)

    app.state.enricher = TransactionEnricher(
        info_provider=app.state.info_provider,
        concurrency=settings.enrich_concurrency,
        lookup_timeout_s=settings.token_lookup_timeout_s,
    )
    app.state.settings = settings

    logger.info("app_started")

    yield

    if cache:
        await cache.close()
        logger.info("redis_disconnected")

    logger.info("app_stopped")


def create_app(info_provider: InfoProvider | None = None) -> FastAPI:
    """创建 FastAPI 应用"""
    app = FastAPI(
        title="Safe Transaction Gateway",
        description="Safe 多签交易类型与状态富化服务",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.info_provider = info_provider

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "message": "Internal server error",
                    "type": "internal_error",
                }
            },
        )

    app.include_router(router)

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "safe_tx_gateway.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.app_env == "local",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
