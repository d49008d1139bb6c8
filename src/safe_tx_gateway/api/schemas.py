from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from safe_tx_gateway.models import ModuleTransaction, MultisigTransaction
from safe_tx_gateway.providers import SafeInfo


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SummaryRequest(RequestModel):
    """单笔多签交易摘要请求"""
    transaction: MultisigTransaction
    # 为空时从交易服务获取
    safe_info: SafeInfo | None = None


class SummariesRequest(RequestModel):
    """同一 Safe 的多笔交易摘要请求"""
    transactions: list[MultisigTransaction] = Field(default_factory=list)
    safe_info: SafeInfo | None = None


class ModuleSummaryRequest(RequestModel):
    transaction: ModuleTransaction


class SummaryResponse(BaseModel):
    trace_id: str
    summary: dict[str, Any]
    timings: dict[str, int] = Field(default_factory=dict)


class SummariesResponse(BaseModel):
    trace_id: str
    results: list[dict[str, Any]] = Field(default_factory=list)
    timings: dict[str, int] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"] = "ok"
    version: str
    dependencies: dict[str, str] = Field(default_factory=dict)
