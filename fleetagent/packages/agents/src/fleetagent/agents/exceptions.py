"""Agents 异常体系

调用方收到的要么是 AgentResult，要么是以下之一的显式错误：
路由失败、必要工具失败、补全服务失败、执行超时。
计划提取错误不在此列，由 planner 内部兜底。
"""


class WorkerError(Exception):
    """agents 包基础异常"""

    def __init__(self, message: str, recoverable: bool = False) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 调用方重新派发是否可能成功
        """
        super().__init__(message)
        self.recoverable = recoverable


class NoWorkerError(WorkerError):
    """任务类型没有已注册的 Worker"""

    def __init__(self, task_type: str) -> None:
        super().__init__(f"no worker registered for task type: {task_type}")
        self.task_type = task_type


class EssentialToolError(WorkerError):
    """必要工具调用失败，任务中止"""

    def __init__(self, tool_name: str, cause: Exception) -> None:
        super().__init__(f"essential tool {tool_name} failed: {cause}", recoverable=True)
        self.tool_name = tool_name
        self.cause = cause


class CompletionFailedError(WorkerError):
    """补全服务调用失败，原样上抛，不在本层重试"""

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"completion failed: {cause}", recoverable=getattr(cause, "recoverable", False))
        self.cause = cause


class TaskTimeoutError(WorkerError):
    """任务执行超过 timeout_minutes"""

    def __init__(self, task_id: str, timeout_s: float) -> None:
        super().__init__(f"task {task_id} timed out after {timeout_s:.0f}s", recoverable=True)
        self.task_id = task_id
        self.timeout_s = timeout_s
