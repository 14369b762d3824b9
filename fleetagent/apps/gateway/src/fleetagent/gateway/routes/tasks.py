"""任务派发路由

POST /api/tasks/dispatch: 同步派发任务，返回经过审批门的 AgentResult。

错误映射：
    NoWorkerError          -> 404 NO_WORKER
    EssentialToolError     -> 502 TOOL_FAILED
    CompletionFailedError  -> 502 COMPLETION_FAILED
    TaskTimeoutError       -> 504 TASK_TIMEOUT
请求体校验失败由 FastAPI 返回 422。
"""

import structlog
from fastapi import APIRouter, Depends
from fleetagent.agents import (
    CompletionFailedError,
    Dispatcher,
    EssentialToolError,
    NoWorkerError,
    TaskTimeoutError,
    WorkerError,
)
from fleetagent.core.models import AgentResult, TaskSpec
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from ..deps import get_dispatcher

log = structlog.get_logger()

router = APIRouter()

# 异常类型 -> (HTTP 状态码, 错误码)
_ERROR_MAP: tuple[tuple[type[WorkerError], int, str], ...] = (
    (NoWorkerError, 404, "NO_WORKER"),
    (EssentialToolError, 502, "TOOL_FAILED"),
    (CompletionFailedError, 502, "COMPLETION_FAILED"),
    (TaskTimeoutError, 504, "TASK_TIMEOUT"),
)


class DispatchRequest(BaseModel):
    """派发请求"""

    task: TaskSpec = Field(description="任务规格")
    preferred_worker: str | None = Field(default=None, description="偏好的 Worker 名称")


def _error_response(e: WorkerError) -> JSONResponse:
    for exc_type, status_code, code in _ERROR_MAP:
        if isinstance(e, exc_type):
            break
    else:
        status_code, code = 500, "WORKER_ERROR"
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": str(e),
                "recoverable": e.recoverable,
            }
        },
    )


@router.post("/api/tasks/dispatch", response_model=AgentResult)
async def dispatch_task(
    body: DispatchRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    """派发任务并等待 Worker 结果"""
    try:
        return await dispatcher.dispatch(body.task, body.preferred_worker)
    except WorkerError as e:
        log.warning(
            "dispatch_failed",
            task_id=body.task.id,
            task_type=body.task.task_type.value,
            error_type=type(e).__name__,
            error=str(e),
        )
        return _error_response(e)
