"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含 Worker 注册情况与工具注册情况；
         profile=llm/full 时额外探测 LiteLLM Proxy。
"""

import structlog
from fastapi import APIRouter, Query, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(
    request: Request,
    profile: str | None = Query(
        default=None,
        description="检查配置：core（默认）仅核心检查；llm/full 包含 LiteLLM Proxy 健康检查",
    ),
):
    """Readiness 检查 -- 验证派发依赖可用性

    检查项：
    1. workers: 已注册 Worker 数，为 0 时 not_ready
    2. tools: 已注册工具数（0 仅记录，不影响就绪：只读 Worker 可在无工具时降级运行）
    3. litellm_proxy: 根据 profile 决定是否探测 Proxy
    """
    effective_profile = profile or "core"

    checks: dict[str, object] = {}
    all_ok = True

    dispatcher = getattr(request.app.state, "dispatcher", None)
    worker_count = len(dispatcher.registry) if dispatcher is not None else 0
    checks["workers"] = worker_count
    if worker_count == 0:
        all_ok = False

    tool_registry = getattr(request.app.state, "tool_registry", None)
    checks["tools"] = len(tool_registry.list_tools()) if tool_registry is not None else 0

    if effective_profile in ("llm", "full"):
        litellm_client = getattr(request.app.state, "litellm_client", None)
        if litellm_client is not None:
            if await litellm_client.health_check():
                checks["litellm_proxy"] = "ok"
            else:
                log.warning("litellm_proxy_unhealthy")
                checks["litellm_proxy"] = "unreachable"
                all_ok = False
        else:
            # echo 模式：无 litellm_client，跳过探测
            checks["litellm_proxy"] = "skipped"
    else:
        checks["litellm_proxy"] = "skipped"

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={
            "status": "ready" if all_ok else "not_ready",
            "profile": effective_profile,
            "checks": checks,
        },
    )
