"""AliasRegistry -- 语义 alias 注册表

语义 alias（planner、analyst 等）-> 运行时 group（Proxy model_name）映射。
"""

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()

# 已知运行时 group 名称
KNOWN_RUNTIME_GROUPS = {"cheap", "main", "fallback"}


class AliasConfig(BaseModel):
    """单个语义 alias 的配置"""

    name: str = Field(description="语义 alias 名称（如 planner, analyst）")
    description: str = Field(default="", description="alias 用途描述")
    runtime_group: str = Field(default="main", description="运行时 group（对应 Proxy model_name）")


def default_aliases() -> list[AliasConfig]:
    """Worker 使用的默认 alias"""
    return [
        AliasConfig(name="planner", runtime_group="main", description="修复计划生成"),
        AliasConfig(name="analyst", runtime_group="main", description="审计/成本/安全分析报告"),
        AliasConfig(name="extractor", runtime_group="cheap", description="需求结构化提取"),
        AliasConfig(name="summarizer", runtime_group="cheap", description="扫描结果摘要"),
    ]


class AliasRegistry:
    """Alias 注册表，启动时加载，运行期间只读"""

    def __init__(self, aliases: list[AliasConfig] | None = None) -> None:
        alias_list = aliases if aliases is not None else default_aliases()
        self._aliases: dict[str, AliasConfig] = {a.name: a for a in alias_list}

    def resolve(self, alias: str) -> str:
        """语义 alias -> 运行时 group

        规则:
            1. 注册表内的 alias -> 对应 runtime_group
            2. 已知运行时 group -> 透传
            3. 其他 -> "main"，并记录 warning
        """
        if alias in self._aliases:
            return self._aliases[alias].runtime_group
        if alias in KNOWN_RUNTIME_GROUPS:
            return alias
        log.warning("unknown_alias_fallback_to_main", alias=alias)
        return "main"
