"""
交易富化服务

对每笔交易至多发起一次 Token 查询，然后同步完成类型分类与状态判断。
查询失败、超时或被取消都按"没有 Token 信息"处理，不影响结果输出。
"""
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Awaitable, Callable, Sequence, TypeVar

from safe_tx_gateway.app_logging import get_logger
from safe_tx_gateway.converters import InfoClassifier, is_settings_change, prefetched
from safe_tx_gateway.converters.status import (
    confirmation_count,
    confirmation_required,
    resolve_module_status,
    resolve_status,
)
from safe_tx_gateway.models import (
    ModuleExecutionInfo,
    ModuleTransaction,
    MultisigExecutionInfo,
    MultisigTransaction,
    Operation,
    TransactionInfo,
    TransactionStatus,
    TransactionSummary,
)
from safe_tx_gateway.providers import InfoProvider, SafeInfo, TokenInfo

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def _timestamp_ms(*dates: datetime | None) -> int | None:
    """取第一个非空时间，转换为毫秒时间戳"""
    for date in dates:
        if date is not None:
            return int(date.timestamp() * 1000)
    return None


class TransactionEnricher:
    """交易富化器"""

    def __init__(
        self,
        info_provider: InfoProvider | None = None,
        classifier: InfoClassifier | None = None,
        concurrency: int = 8,
        lookup_timeout_s: float | None = None,
    ):
        self.info_provider = info_provider
        self.classifier = classifier or InfoClassifier()
        self.concurrency = max(1, concurrency)
        self.lookup_timeout_s = lookup_timeout_s

    def _needs_token(self, tx: MultisigTransaction) -> bool:
        # 只有 Token 转账分支会用到查询结果
        return (
            self.info_provider is not None
            and tx.operation == Operation.CALL
            and tx.data_decoded is not None
            and not is_settings_change(tx)
        )

    async def resolve_token(self, tx: MultisigTransaction) -> TokenInfo | None:
        """查询交易目标地址的 Token 信息，任何失败均返回 None"""
        if not self._needs_token(tx):
            return None

        try:
            lookup = self.info_provider.token_info(tx.to)
            if self.lookup_timeout_s is not None:
                return await asyncio.wait_for(lookup, timeout=self.lookup_timeout_s)
            return await lookup
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.debug("token_lookup_cancelled", address=tx.to)
            return None
        except Exception as e:
            logger.debug("token_lookup_failed", address=tx.to, error=str(e))
            return None

    async def enrich(
        self,
        tx: MultisigTransaction,
        safe_info: SafeInfo,
        token: TokenInfo | None = None,
    ) -> tuple[TransactionInfo, TransactionStatus]:
        """
        富化单笔多签交易

        Args:
            tx: 多签交易
            safe_info: Safe 当前状态
            token: 调用方预先获取的 Token 信息；为空时按需查询

        Returns:
            (TransactionInfo, TransactionStatus)
        """
        if token is None:
            token = await self.resolve_token(tx)

        tx_info = self.classifier.classify(tx, prefetched(token))
        tx_status = resolve_status(tx, safe_info)

        logger.debug(
            "tx_classified",
            safe=tx.safe,
            nonce=tx.nonce,
            tx_type=tx_info.type,
            tx_status=tx_status.value,
        )
        return tx_info, tx_status

    async def summarize(
        self,
        tx: MultisigTransaction,
        safe_info: SafeInfo,
        token: TokenInfo | None = None,
    ) -> TransactionSummary:
        """构建多签交易摘要"""
        tx_info, tx_status = await self.enrich(tx, safe_info, token)
        tx_id = tx.safe_tx_hash if tx.safe_tx_hash else str(tx.nonce)

        return TransactionSummary(
            id=f"multisig_{tx.safe}_{tx_id}",
            timestamp=_timestamp_ms(tx.execution_date, tx.submission_date),
            tx_status=tx_status,
            tx_info=tx_info,
            execution_info=MultisigExecutionInfo(
                nonce=tx.nonce,
                confirmations_required=confirmation_required(tx, safe_info.threshold),
                confirmations_submitted=confirmation_count(tx),
            ),
        )

    def summarize_module(self, tx: ModuleTransaction) -> TransactionSummary:
        """构建模块交易摘要"""
        return TransactionSummary(
            id=f"module_{tx.safe}_{tx.transaction_hash or ''}",
            timestamp=_timestamp_ms(tx.execution_date),
            tx_status=resolve_module_status(tx),
            tx_info=self.classifier.classify_module(tx),
            execution_info=ModuleExecutionInfo(address=tx.module),
        )

    async def _gather_bounded(self, items: Sequence[T], func: Callable[[T], Awaitable[R]]) -> list[R]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(item: T) -> R:
            async with semaphore:
                return await func(item)

        return list(await asyncio.gather(*(run(item) for item in items)))

    async def enrich_many(
        self,
        txs: Sequence[MultisigTransaction],
        safe_info: SafeInfo,
    ) -> list[tuple[TransactionInfo, TransactionStatus]]:
        """并发富化同一个 Safe 的多笔交易，结果顺序与输入一致"""
        return await self._gather_bounded(txs, lambda tx: self.enrich(tx, safe_info))

    async def summarize_many(
        self,
        txs: Sequence[MultisigTransaction],
        safe_info: SafeInfo,
    ) -> list[TransactionSummary]:
        return await self._gather_bounded(txs, lambda tx: self.summarize(tx, safe_info))
