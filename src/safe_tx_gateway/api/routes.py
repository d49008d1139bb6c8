from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from safe_tx_gateway import __version__
from safe_tx_gateway.app_logging import Tracer, bind_context, clear_context, get_logger
from safe_tx_gateway.enricher import TransactionEnricher
from safe_tx_gateway.providers import InfoProvider, InfoProviderError, SafeInfo
from safe_tx_gateway.storage import RedisCache

from .schemas import (
    HealthResponse,
    ModuleSummaryRequest,
    SummariesRequest,
    SummariesResponse,
    SummaryRequest,
    SummaryResponse,
)

logger = get_logger(__name__)
router = APIRouter()


def get_enricher(request: Request) -> TransactionEnricher:
    return request.app.state.enricher


def get_info_provider(request: Request) -> InfoProvider:
    return request.app.state.info_provider


def get_cache(request: Request) -> RedisCache | None:
    return getattr(request.app.state, "cache", None)


def _error_response(status_code: int, message: str, error_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": message, "type": error_type}},
    )


async def _load_safe_info(request: Request, tracer: Tracer, safe: str, safe_info: SafeInfo | None) -> SafeInfo:
    """请求未携带 Safe 状态时从交易服务获取"""
    if safe_info is not None:
        return safe_info

    with tracer.step("fetch_safe_info") as step:
        safe_info = await get_info_provider(request).safe_info(safe)
        step.set_output({"nonce": safe_info.nonce, "threshold": safe_info.threshold})
    return safe_info


@router.get("/healthz", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """健康检查"""
    dependencies: dict[str, str] = {}

    cache = get_cache(request)
    if cache:
        try:
            ok = await cache.set("health_check", {"status": "ok"}, 10)
            dependencies["redis"] = "ok" if ok else "unhealthy"
        except Exception:
            dependencies["redis"] = "unhealthy"
    else:
        dependencies["redis"] = "not_configured"

    status = "degraded" if any(v == "unhealthy" for v in dependencies.values()) else "ok"
    return HealthResponse(status=status, version=__version__, dependencies=dependencies)


@router.post("/v1/transactions/summary", response_model=SummaryResponse)
async def transaction_summary(req: SummaryRequest, request: Request):
    """多签交易摘要"""
    tx = req.transaction
    tracer = Tracer(safe=tx.safe)
    bind_context(trace_id=tracer.trace_id, safe=tx.safe, nonce=tx.nonce)

    try:
        try:
            safe_info = await _load_safe_info(request, tracer, tx.safe, req.safe_info)
        except InfoProviderError as e:
            logger.warning("safe_info_error", error=str(e), status_code=e.status_code)
            return _error_response(502, f"Could not load safe info: {e}", "upstream_error")

        with tracer.step("enrich") as step:
            summary = await get_enricher(request).summarize(tx, safe_info)
            step.set_output({"tx_type": summary.tx_info.type, "tx_status": summary.tx_status.value})

        return SummaryResponse(
            trace_id=tracer.trace_id,
            summary=summary.to_dict(),
            timings=tracer.get_timings(),
        )
    finally:
        clear_context()


@router.post("/v1/transactions/summaries", response_model=SummariesResponse)
async def transaction_summaries(req: SummariesRequest, request: Request):
    """同一 Safe 的多笔交易摘要，结果顺序与请求一致"""
    tracer = Tracer()
    if not req.transactions:
        return SummariesResponse(trace_id=tracer.trace_id, timings=tracer.get_timings())

    safes = {tx.safe.lower() for tx in req.transactions}
    if len(safes) > 1:
        return _error_response(400, "All transactions must belong to the same safe", "invalid_request")

    safe = req.transactions[0].safe
    tracer.safe = safe
    bind_context(trace_id=tracer.trace_id, safe=safe, count=len(req.transactions))

    try:
        try:
            safe_info = await _load_safe_info(request, tracer, safe, req.safe_info)
        except InfoProviderError as e:
            logger.warning("safe_info_error", error=str(e), status_code=e.status_code)
            return _error_response(502, f"Could not load safe info: {e}", "upstream_error")

        with tracer.step("enrich") as step:
            summaries = await get_enricher(request).summarize_many(req.transactions, safe_info)
            step.set_output({"count": len(summaries)})

        return SummariesResponse(
            trace_id=tracer.trace_id,
            results=[summary.to_dict() for summary in summaries],
            timings=tracer.get_timings(),
        )
    finally:
        clear_context()


@router.post("/v1/module-transactions/summary", response_model=SummaryResponse)
async def module_transaction_summary(req: ModuleSummaryRequest, request: Request) -> SummaryResponse:
    """模块交易摘要"""
    tx = req.transaction
    tracer = Tracer(safe=tx.safe)
    bind_context(trace_id=tracer.trace_id, safe=tx.safe, module=tx.module)

    try:
        with tracer.step("enrich") as step:
            summary = get_enricher(request).summarize_module(tx)
            step.set_output({"tx_type": summary.tx_info.type, "tx_status": summary.tx_status.value})

        return SummaryResponse(
            trace_id=tracer.trace_id,
            summary=summary.to_dict(),
            timings=tracer.get_timings(),
        )
    finally:
        clear_context()
