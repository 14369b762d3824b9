"""依赖注入模块 -- 通过 FastAPI Depends 注入派发组件

组件通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Request
from fleetagent.agents import Dispatcher, WorkerRegistry
from fleetagent.tools import ToolRegistry


def get_dispatcher(request: Request) -> Dispatcher:
    """从 app.state 获取 Dispatcher 实例"""
    return request.app.state.dispatcher


def get_worker_registry(request: Request) -> WorkerRegistry:
    return request.app.state.dispatcher.registry


def get_tool_registry(request: Request) -> ToolRegistry:
    return request.app.state.tool_registry
