from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from .logger import get_logger

logger = get_logger(__name__)


@dataclass
class TraceStep:
    """单个追踪步骤"""

    step: int
    name: str
    started_at: str
    ended_at: str | None = None
    duration_ms: int | None = None
    status: str = "pending"  # pending / success / failed
    output: dict[str, Any] | None = None
    error: str | None = None


class Tracer:
    """请求追踪器

    记录一次汇总请求中的各个步骤（获取 Safe 状态、富化交易）及其耗时。
    """

    def __init__(self, trace_id: str | None = None, safe: str | None = None):
        self.trace_id = trace_id or self._generate_trace_id()
        self.safe = safe
        self.steps: list[TraceStep] = []
        self.started_at = datetime.now(timezone.utc)
        self._step_start_time: float | None = None

    @staticmethod
    def _generate_trace_id() -> str:
        date_str = datetime.now(timezone.utc).strftime("%Y%m%d")
        return f"sum-{date_str}-{uuid.uuid4().hex[:12]}"

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()

    def start_step(self, name: str) -> TraceStep:
        """开始一个新步骤"""
        self._step_start_time = time.perf_counter()
        step = TraceStep(step=len(self.steps) + 1, name=name, started_at=self._now_iso())
        self.steps.append(step)
        logger.debug("trace_step_started", trace_id=self.trace_id, step=step.step, name=name)
        return step

    def end_step(
        self,
        status: str = "success",
        output_data: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> TraceStep | None:
        """结束当前步骤"""
        if not self.steps:
            return None

        step = self.steps[-1]
        step.ended_at = self._now_iso()
        step.status = status
        step.output = output_data
        step.error = error
        if self._step_start_time is not None:
            step.duration_ms = int((time.perf_counter() - self._step_start_time) * 1000)

        logger.debug(
            "trace_step_ended",
            trace_id=self.trace_id,
            step=step.step,
            name=step.name,
            status=status,
            duration_ms=step.duration_ms,
            error=error,
        )
        self._step_start_time = None
        return step

    def step(self, name: str) -> _TracerStepContext:
        """上下文管理器方式使用"""
        return _TracerStepContext(self, name)

    def get_total_duration_ms(self) -> int:
        return int((datetime.now(timezone.utc) - self.started_at).total_seconds() * 1000)

    def get_timings(self) -> dict[str, int]:
        """获取各步骤耗时汇总"""
        timings: dict[str, int] = {"total_ms": self.get_total_duration_ms()}
        for step in self.steps:
            if step.duration_ms is not None:
                timings[f"{step.name}_ms"] = step.duration_ms
        return timings


class _TracerStepContext:
    def __init__(self, tracer: Tracer, name: str):
        self.tracer = tracer
        self.name = name
        self.output_data: dict[str, Any] | None = None

    def __enter__(self):
        self.tracer.start_step(self.name)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.tracer.end_step(status="failed", output_data=self.output_data, error=str(exc_val))
        else:
            self.tracer.end_step(status="success", output_data=self.output_data)
        return False

    def set_output(self, output_data: dict[str, Any]) -> None:
        self.output_data = output_data
