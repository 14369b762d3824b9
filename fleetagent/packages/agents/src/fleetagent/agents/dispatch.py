"""Dispatcher -- 路由、超时与审批门

每个任务：registry 解析候选 Worker -> 选择 -> 在超时内执行 -> finalize。
Worker 的结果都经过 planner.gate.finalize()，没有旁路。
"""

import asyncio
import time

import structlog
from fleetagent.core.models import AgentResult, TaskSpec
from fleetagent.planner import finalize

from .base import BaseWorker
from .exceptions import NoWorkerError, TaskTimeoutError
from .registry import WorkerRegistry

log = structlog.get_logger()


class Dispatcher:
    """任务派发器

    选择策略：调用方指定的 preferred_worker 若支持该任务类型则使用，
    否则使用最先注册的 Worker。
    """

    def __init__(self, registry: WorkerRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> WorkerRegistry:
        return self._registry

    def select(self, task: TaskSpec, preferred_worker: str | None = None) -> BaseWorker:
        """选择执行 Worker

        Raises:
            NoWorkerError: 没有 Worker 支持该任务类型
        """
        candidates = self._registry.get_for_task(task.task_type)
        if not candidates:
            raise NoWorkerError(task.task_type.value)
        if preferred_worker:
            for worker in candidates:
                if worker.name == preferred_worker:
                    return worker
            log.warning(
                "preferred_worker_unavailable",
                task_id=task.id,
                preferred=preferred_worker,
                task_type=task.task_type.value,
            )
        return candidates[0]

    async def dispatch(self, task: TaskSpec, preferred_worker: str | None = None) -> AgentResult:
        """派发并执行任务

        Args:
            task: 任务规格
            preferred_worker: 调用方偏好的 Worker 名称

        Returns:
            经过审批门的 AgentResult

        Raises:
            NoWorkerError: 路由失败
            EssentialToolError: 必要工具失败
            CompletionFailedError: 补全服务失败
            TaskTimeoutError: 执行超时
        """
        worker = self.select(task, preferred_worker)
        timeout_s = task.timeout_minutes * 60
        structlog.contextvars.bind_contextvars(task_id=task.id)
        log.info(
            "task_dispatched",
            task_type=task.task_type.value,
            worker=worker.name,
            timeout_s=timeout_s,
        )

        start = time.monotonic()
        try:
            async with asyncio.timeout(timeout_s) as scope:
                result = await worker.execute(task)
        except TimeoutError as e:
            if not scope.expired():
                raise
            log.error("task_timed_out", worker=worker.name, timeout_s=timeout_s)
            raise TaskTimeoutError(task.id, timeout_s) from e
        finally:
            structlog.contextvars.unbind_contextvars("task_id")

        final = finalize(result, task)
        log.info(
            "task_completed",
            task_id=task.id,
            worker=worker.name,
            status=final.status.value,
            quality_score=final.quality_score,
            risk_level=final.risk_level.value,
            parse_method=final.parse_method.value,
            hitl_required=final.hitl_required,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        return final
