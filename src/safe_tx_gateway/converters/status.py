from __future__ import annotations

from safe_tx_gateway.models import ModuleTransaction, MultisigTransaction, TransactionStatus
from safe_tx_gateway.providers import SafeInfo


def confirmation_count(tx: MultisigTransaction) -> int:
    return len(tx.confirmations) if tx.confirmations is not None else 0


def confirmation_required(tx: MultisigTransaction, threshold: int) -> int:
    if tx.confirmations_required is not None:
        return tx.confirmations_required
    return threshold


def resolve_status(tx: MultisigTransaction, safe_info: SafeInfo) -> TransactionStatus:
    """根据执行结果、nonce 与确认数确定交易状态"""
    if tx.is_executed:
        return TransactionStatus.SUCCESS if tx.is_successful else TransactionStatus.FAILED
    # Safe nonce 已越过该交易，永远无法执行
    if safe_info.nonce > tx.nonce:
        return TransactionStatus.CANCELLED
    if confirmation_count(tx) < confirmation_required(tx, safe_info.threshold):
        return TransactionStatus.AWAITING_CONFIRMATIONS
    return TransactionStatus.AWAITING_EXECUTION


def resolve_module_status(tx: ModuleTransaction) -> TransactionStatus:
    return TransactionStatus.SUCCESS if tx.is_successful else TransactionStatus.FAILED
