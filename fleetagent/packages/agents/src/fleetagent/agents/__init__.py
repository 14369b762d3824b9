"""FleetAgent Agents -- Specialist Worker、注册表与派发器"""

from .base import BaseWorker, WorkerRun, decision_actions
from .dispatch import Dispatcher
from .exceptions import (
    CompletionFailedError,
    EssentialToolError,
    NoWorkerError,
    TaskTimeoutError,
    WorkerError,
)
from .registry import WorkerRegistry
from .workers import WORKER_CLASSES, default_workers

__all__ = [
    # 契约
    "BaseWorker",
    "WorkerRun",
    "decision_actions",
    # 注册与派发
    "WorkerRegistry",
    "Dispatcher",
    "WORKER_CLASSES",
    "default_workers",
    # 异常
    "WorkerError",
    "NoWorkerError",
    "EssentialToolError",
    "CompletionFailedError",
    "TaskTimeoutError",
]
