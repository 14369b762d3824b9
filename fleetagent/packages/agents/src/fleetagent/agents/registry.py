"""WorkerRegistry -- 按名称与任务类型查找 Worker

唯一的共享可变状态。注册在启动阶段完成，之后并发只读；
所有读写都在同一把锁内进行。
"""

import threading

import structlog
from fleetagent.core.models import TaskType, WorkerDescriptor

from .base import BaseWorker

log = structlog.get_logger()


class WorkerRegistry:
    """Worker 注册表"""

    def __init__(self, workers: list[BaseWorker] | None = None) -> None:
        self._lock = threading.Lock()
        self._workers: dict[str, BaseWorker] = {}
        self._by_task: dict[TaskType, list[str]] = {}
        for worker in workers or []:
            self.register(worker)

    def register(self, worker: BaseWorker) -> None:
        """注册 Worker

        同名再次注册替换旧实例，任务类型列表中不会出现重复名称。
        """
        with self._lock:
            replaced = worker.name in self._workers
            self._workers[worker.name] = worker

            # 替换时清理新实例不再支持的任务类型
            for task_type, names in self._by_task.items():
                if worker.name in names and task_type not in worker.supported_tasks:
                    names.remove(worker.name)

            for task_type in worker.supported_tasks:
                names = self._by_task.setdefault(task_type, [])
                if worker.name not in names:
                    names.append(worker.name)

        log.info(
            "worker_registered",
            worker=worker.name,
            tasks=[t.value for t in worker.supported_tasks],
            replaced=replaced,
        )

    def get(self, name: str) -> BaseWorker | None:
        with self._lock:
            return self._workers.get(name)

    def get_for_task(self, task_type: TaskType | str) -> list[BaseWorker]:
        """按注册顺序返回支持该任务类型的全部 Worker，未知类型返回空列表"""
        try:
            key = TaskType(task_type)
        except ValueError:
            return []
        with self._lock:
            return [self._workers[n] for n in self._by_task.get(key, [])]

    def list_workers(self) -> list[str]:
        with self._lock:
            return sorted(self._workers)

    def worker_info(self) -> list[WorkerDescriptor]:
        """按名称排序的 Worker 描述"""
        with self._lock:
            workers = [self._workers[n] for n in sorted(self._workers)]
        return [w.descriptor() for w in workers]

    def __len__(self) -> int:
        with self._lock:
            return len(self._workers)
