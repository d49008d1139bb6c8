"""
面向客户端的交易描述模型

TransactionInfo / TransferInfo 通过 `type` 字段区分变体，变体名称和状态标签是对外稳定的字段值。
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .data_decoded import DataDecoded


class ServiceModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """转换为字典（用于 JSON 序列化）"""
        return self.model_dump(mode="json", by_alias=True)


class TransactionStatus(str, Enum):
    SUCCESS = "Success"
    FAILED = "Failed"
    CANCELLED = "Cancelled"
    AWAITING_CONFIRMATIONS = "AwaitingConfirmations"
    AWAITING_EXECUTION = "AwaitingExecution"


class Erc20Transfer(ServiceModel):
    type: Literal["Erc20"] = "Erc20"
    token_address: str
    logo_uri: str | None = None
    token_name: str | None = None
    token_symbol: str | None = None
    decimals: int | None = None
    value: str


class Erc721Transfer(ServiceModel):
    type: Literal["Erc721"] = "Erc721"
    token_address: str
    token_name: str | None = None
    token_symbol: str | None = None
    token_id: str
    logo_uri: str | None = None


class EtherTransfer(ServiceModel):
    type: Literal["Ether"] = "Ether"
    value: str


TransferInfo = Annotated[
    Union[Erc20Transfer, Erc721Transfer, EtherTransfer],
    Field(discriminator="type"),
]


class SettingsChange(ServiceModel):
    type: Literal["SettingsChange"] = "SettingsChange"
    data_decoded: DataDecoded


class Transfer(ServiceModel):
    type: Literal["Transfer"] = "Transfer"
    sender: str
    recipient: str
    transfer_info: TransferInfo


class Custom(ServiceModel):
    type: Literal["Custom"] = "Custom"
    to: str
    # 十六进制字符数减去 "0x" 前缀，不是字节数
    data_size: str
    value: str


TransactionInfo = Annotated[
    Union[SettingsChange, Transfer, Custom],
    Field(discriminator="type"),
]


class MultisigExecutionInfo(ServiceModel):
    type: Literal["MULTISIG"] = "MULTISIG"
    nonce: int
    confirmations_required: int
    confirmations_submitted: int


class ModuleExecutionInfo(ServiceModel):
    type: Literal["MODULE"] = "MODULE"
    address: str


ExecutionInfo = Annotated[
    Union[MultisigExecutionInfo, ModuleExecutionInfo],
    Field(discriminator="type"),
]


class TransactionSummary(ServiceModel):
    """交易列表中的单条交易摘要"""
    id: str
    timestamp: int | None = None
    tx_status: TransactionStatus
    tx_info: TransactionInfo
    execution_info: ExecutionInfo | None = None
