"""
转账字段构建

从解码后的调用中按顺序回退读取参数，构建 ERC20 / ERC721 / ETH 转账描述。
"""
from __future__ import annotations

from safe_tx_gateway.models import (
    DecodedCall,
    Erc20Transfer,
    Erc721Transfer,
    EtherTransfer,
    MultisigTransaction,
    Transfer,
)
from safe_tx_gateway.providers import TokenInfo

DEFAULT_RECIPIENT = "0x0"
DEFAULT_AMOUNT = "0"


def get_parameter(data_decoded: DecodedCall | None, *names: str, default: str) -> str:
    """按顺序尝试参数名，返回第一个存在的值"""
    if data_decoded is not None:
        for name in names:
            value = data_decoded.get_parameter_value(name)
            if value is not None:
                return value
    return default


def data_size(data: str | None) -> str:
    """
    calldata 长度指标

    返回十六进制字符数减去 2（"0x" 前缀），不是字节数；下游依赖该取值，保持不变。
    """
    if data is None:
        return "0"
    return str(max(0, len(data) - 2))


def build_erc20_transfer(tx: MultisigTransaction, token: TokenInfo) -> Transfer:
    return Transfer(
        sender=tx.safe,
        recipient=get_parameter(tx.data_decoded, "to", default=DEFAULT_RECIPIENT),
        transfer_info=Erc20Transfer(
            token_address=token.address,
            logo_uri=token.logo_uri,
            token_name=token.name,
            token_symbol=token.symbol,
            decimals=token.decimals,
            value=get_parameter(tx.data_decoded, "value", default=DEFAULT_AMOUNT),
        ),
    )


def build_erc721_transfer(tx: MultisigTransaction, token: TokenInfo) -> Transfer:
    # 不同合约的解码结果参数名不同，回退顺序不可调换
    return Transfer(
        sender=tx.safe,
        recipient=get_parameter(tx.data_decoded, "_to", "to", default=DEFAULT_RECIPIENT),
        transfer_info=Erc721Transfer(
            token_address=token.address,
            token_name=token.name,
            token_symbol=token.symbol,
            token_id=get_parameter(tx.data_decoded, "tokenId", "value", default=DEFAULT_AMOUNT),
            logo_uri=token.logo_uri,
        ),
    )


def build_ether_transfer(tx: MultisigTransaction) -> Transfer:
    return Transfer(
        sender=tx.safe,
        recipient=tx.to,
        transfer_info=EtherTransfer(value=tx.value or DEFAULT_AMOUNT),
    )
