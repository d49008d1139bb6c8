from .data_decoded import (
    DataDecoded,
    DecodedCall,
    Parameter,
    SETTINGS_CHANGE_METHODS,
    ERC20_TRANSFER_METHODS,
    ERC721_TRANSFER_METHODS,
)
from .backend import Confirmation, ModuleTransaction, MultisigTransaction, Operation
from .service import (
    Custom,
    Erc20Transfer,
    Erc721Transfer,
    EtherTransfer,
    ExecutionInfo,
    ModuleExecutionInfo,
    MultisigExecutionInfo,
    SettingsChange,
    TransactionInfo,
    TransactionStatus,
    TransactionSummary,
    Transfer,
    TransferInfo,
)

__all__ = [
    # 解码调用
    "DataDecoded",
    "DecodedCall",
    "Parameter",
    "SETTINGS_CHANGE_METHODS",
    "ERC20_TRANSFER_METHODS",
    "ERC721_TRANSFER_METHODS",
    # 后端模型
    "Confirmation",
    "ModuleTransaction",
    "MultisigTransaction",
    "Operation",
    # 服务模型
    "Custom",
    "Erc20Transfer",
    "Erc721Transfer",
    "EtherTransfer",
    "ExecutionInfo",
    "ModuleExecutionInfo",
    "MultisigExecutionInfo",
    "SettingsChange",
    "TransactionInfo",
    "TransactionStatus",
    "TransactionSummary",
    "Transfer",
    "TransferInfo",
]
