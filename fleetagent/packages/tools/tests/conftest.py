"""packages/tools 测试 fixtures"""

import pytest
from fleetagent.tools import FunctionTool, ToolRegistry
from fleetagent.tools.params import QueryAssetsParams


async def _query_assets(params: dict) -> dict:
    return {"assets": [{"id": "i-1"}, {"id": "i-2"}], "total": 2, "echo": params}


async def _broken(params: dict) -> dict:
    raise RuntimeError("backend exploded")


@pytest.fixture
def tool_registry() -> ToolRegistry:
    """包含一个正常工具与一个故障工具的注册表"""
    return ToolRegistry(
        [
            FunctionTool("query_assets", _query_assets, params_model=QueryAssetsParams),
            FunctionTool("broken_tool", _broken),
        ]
    )
