"""
交易类型分类

按固定顺序依次匹配，命中第一个即返回：

1. 设置变更（调用 Safe 自身的管理方法）
2. ERC20 转账
3. ERC721 转账
4. ETH 转账
5. 自定义调用（兜底，总能命中）

设置变更必须先于 Token 判断；DELEGATE 调用不满足任何 CALL 条件，统一落到自定义调用。
"""
from __future__ import annotations

from typing import Callable

from safe_tx_gateway.app_logging import get_logger
from safe_tx_gateway.models import (
    Custom,
    ModuleTransaction,
    MultisigTransaction,
    Operation,
    SettingsChange,
    TransactionInfo,
)
from safe_tx_gateway.providers import TokenInfo, TokenType

from .parameters import (
    DEFAULT_AMOUNT,
    build_erc20_transfer,
    build_erc721_transfer,
    build_ether_transfer,
    data_size,
)

logger = get_logger(__name__)

# 同步的 Token 查询能力；抛出异常或返回 None 均视为没有 Token 信息
TokenLookup = Callable[[str], TokenInfo | None]


def prefetched(token: TokenInfo | None) -> TokenLookup:
    """把已获取的 Token 信息包装成查询函数"""
    return lambda address: token


def parse_value(value: str | None) -> int:
    """解析十进制金额，缺失或非法时为 0

    只接受可选正负号加 ASCII 数字，不接受空白、下划线分隔或其他 Unicode 数字。
    """
    if value is None or not value.isascii():
        return 0
    digits = value[1:] if value[:1] in ("+", "-") else value
    if not digits.isdigit():
        return 0
    return int(value)


def is_call(tx: MultisigTransaction) -> bool:
    return tx.operation == Operation.CALL


def is_settings_change(tx: MultisigTransaction) -> bool:
    return (
        tx.to == tx.safe
        and is_call(tx)
        and tx.data_decoded is not None
        and tx.data_decoded.is_settings_change()
    )


def is_erc20_transfer(tx: MultisigTransaction, token: TokenInfo | None) -> bool:
    return (
        is_call(tx)
        and token is not None
        and token.token_type == TokenType.ERC20
        and tx.data_decoded is not None
        and tx.data_decoded.is_erc20_transfer_method()
    )


def is_erc721_transfer(tx: MultisigTransaction, token: TokenInfo | None) -> bool:
    return (
        is_call(tx)
        and token is not None
        and token.token_type == TokenType.ERC721
        and tx.data_decoded is not None
        and tx.data_decoded.is_erc721_transfer_method()
    )


def is_ether_transfer(tx: MultisigTransaction) -> bool:
    return is_call(tx) and tx.data is None and parse_value(tx.value) > 0


def to_custom(to: str, data: str | None, value: str | None) -> Custom:
    return Custom(to=to, data_size=data_size(data), value=value or DEFAULT_AMOUNT)


class InfoClassifier:
    """交易类型分类器"""

    def _lookup_token(self, address: str, token_lookup: TokenLookup | None) -> TokenInfo | None:
        if token_lookup is None:
            return None
        try:
            return token_lookup(address)
        except Exception as e:
            logger.debug("token_lookup_failed", address=address, error=str(e))
            return None

    def classify(self, tx: MultisigTransaction, token_lookup: TokenLookup | None = None) -> TransactionInfo:
        """
        确定多签交易的类型

        Args:
            tx: 多签交易
            token_lookup: Token 查询函数，仅在非设置变更时调用且最多一次

        Returns:
            SettingsChange / Transfer / Custom 之一
        """
        if is_settings_change(tx):
            return SettingsChange(data_decoded=tx.data_decoded)

        token = self._lookup_token(tx.to, token_lookup)

        if is_erc20_transfer(tx, token):
            return build_erc20_transfer(tx, token)
        if is_erc721_transfer(tx, token):
            return build_erc721_transfer(tx, token)
        if is_ether_transfer(tx):
            return build_ether_transfer(tx)
        return to_custom(tx.to, tx.data, tx.value)

    def classify_module(self, tx: ModuleTransaction) -> TransactionInfo:
        """模块交易不走分类链，总是自定义调用"""
        return to_custom(tx.to, tx.data, tx.value)
