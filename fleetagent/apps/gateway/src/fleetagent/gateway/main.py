"""FastAPI 应用主文件

app 创建 + lifespan 管理：补全服务 / 工具注册表 / Worker 注册表初始化，
关闭时释放工具服务 HTTP 连接。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI
from fleetagent.agents import Dispatcher, WorkerRegistry, default_workers
from fleetagent.provider import build_completion_service, load_provider_config
from fleetagent.tools import ToolRegistry, build_remote_registry, load_tools_config

from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import health, tasks, workers

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理"""
    # 补全服务（litellm 模式下保留 client 供 /ready 探测）
    provider_config = load_provider_config()
    completion, litellm_client = build_completion_service(provider_config)
    app.state.provider_config = provider_config
    app.state.litellm_client = litellm_client

    # 工具注册表：未配置工具服务时为空，必要工具调用将以 TOOL_FAILED 返回
    tools_config = load_tools_config()
    tools_client: httpx.AsyncClient | None = None
    if tools_config.base_url:
        tools_client = httpx.AsyncClient(base_url=tools_config.base_url, timeout=tools_config.timeout_s)
        tool_registry = build_remote_registry(tools_config, tools_client)
    else:
        log.warning("tools_service_not_configured", env_var="FLEETAGENT_TOOLS_URL")
        tool_registry = ToolRegistry()
    app.state.tool_registry = tool_registry

    registry = WorkerRegistry(default_workers(completion, tool_registry))
    app.state.dispatcher = Dispatcher(registry)
    log.info(
        "gateway_started",
        llm_mode=provider_config.llm_mode,
        workers=len(registry),
        tools=len(tool_registry.list_tools()),
    )

    yield

    if tools_client is not None:
        await tools_client.aclose()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="FleetAgent Gateway",
        version="0.1.0",
        description="FleetAgent 任务派发 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()

    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(workers.router, tags=["workers"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
