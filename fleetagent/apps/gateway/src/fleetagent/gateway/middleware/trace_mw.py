"""TraceMiddleware -- 调用方追踪 ID

调用方可通过 X-Trace-ID 请求头传入追踪 ID（如上游工单或审批流 ID），
绑定到 structlog contextvars，贯穿一次派发的全部日志；未传入时不绑定。
"""

import re

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

TRACE_HEADER = "X-Trace-ID"

# 仅接受安全字符，避免日志注入
_TRACE_ID_RE = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件"""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = request.headers.get(TRACE_HEADER)
        if trace_id and _TRACE_ID_RE.match(trace_id):
            structlog.contextvars.bind_contextvars(trace_id=trace_id)
            response = await call_next(request)
            response.headers[TRACE_HEADER] = trace_id
            return response

        return await call_next(request)
