"""
交易服务返回的原始交易模型

字段与 Safe Transaction Service 的 JSON 一致（camelCase），同时接受 snake_case。
"""
from __future__ import annotations

from datetime import datetime
from enum import IntEnum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .data_decoded import DataDecoded


class Operation(IntEnum):
    CALL = 0
    DELEGATE = 1


class BackendModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Confirmation(BackendModel):
    """多签确认记录"""
    owner: str
    submission_date: datetime | None = None
    signature: str | None = None


class MultisigTransaction(BackendModel):
    """多签交易"""
    safe: str
    to: str
    value: str | None = None
    data: str | None = None
    data_decoded: DataDecoded | None = None
    # 缺失时不视为 CALL
    operation: Operation | None = None
    nonce: int
    is_executed: bool = False
    is_successful: bool | None = None
    confirmations: list[Confirmation] | None = None
    confirmations_required: int | None = None

    safe_tx_hash: str | None = None
    submission_date: datetime | None = None
    execution_date: datetime | None = None
    transaction_hash: str | None = None


class ModuleTransaction(BackendModel):
    """模块发起的交易（无确认流程）"""
    safe: str
    module: str
    to: str
    value: str | None = None
    data: str | None = None
    data_decoded: DataDecoded | None = None
    operation: Operation | None = None
    is_successful: bool = False
    execution_date: datetime | None = None
    transaction_hash: str | None = None
    block_number: int | None = None
