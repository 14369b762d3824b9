"""FleetAgent Provider -- 补全服务抽象层

packages/provider 的公开接口导出。
"""

from .alias import AliasConfig, AliasRegistry
from .client import LiteLLMClient
from .completion import CompletionService, build_completion_service
from .config import ProviderConfig, load_provider_config
from .echo_adapter import EchoMessageAdapter
from .exceptions import ModelRejectedError, ProviderError, ProxyUnreachableError
from .fallback import FallbackManager
from .models import (
    CompletionRequest,
    CompletionResponse,
    Message,
    ModelCallResult,
    TokenUsage,
)

__all__ = [
    # 数据模型
    "TokenUsage",
    "ModelCallResult",
    "Message",
    "CompletionRequest",
    "CompletionResponse",
    # 核心组件
    "LiteLLMClient",
    "EchoMessageAdapter",
    "FallbackManager",
    "AliasConfig",
    "AliasRegistry",
    "CompletionService",
    "build_completion_service",
    # 配置
    "ProviderConfig",
    "load_provider_config",
    # 异常
    "ProviderError",
    "ProxyUnreachableError",
    "ModelRejectedError",
]
