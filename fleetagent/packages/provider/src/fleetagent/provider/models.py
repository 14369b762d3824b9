"""数据模型 -- TokenUsage / ModelCallResult / 补全请求与响应

ModelCallResult 是各后端（LiteLLM、Echo、Mock）的统一返回；
CompletionRequest / CompletionResponse 是 Worker 面向的补全服务契约。
"""

from pydantic import BaseModel, Field


class TokenUsage(BaseModel):
    """Token 使用统计

    key 命名对齐 OpenAI/LiteLLM：prompt_tokens / completion_tokens / total_tokens
    """

    prompt_tokens: int = Field(default=0, ge=0, description="输入 token 数")
    completion_tokens: int = Field(default=0, ge=0, description="输出 token 数")
    total_tokens: int = Field(default=0, ge=0, description="总 token 数")


class ModelCallResult(BaseModel):
    """单次后端调用结果"""

    content: str = Field(description="响应文本内容")

    # 路由信息
    model_alias: str = Field(description="请求时使用的运行时 group")
    model_name: str = Field(default="", description="实际调用的模型名称")
    provider: str = Field(default="", description="实际 provider（如 openai/anthropic）")
    finish_reason: str = Field(default="", description="后端返回的结束原因（stop/length/...）")

    duration_ms: int = Field(ge=0, description="端到端耗时（毫秒）")
    token_usage: TokenUsage = Field(default_factory=TokenUsage, description="Token 使用详情")

    # 成本
    cost_usd: float = Field(default=0.0, ge=0.0, description="本次调用的 USD 成本")
    cost_unavailable: bool = Field(default=False, description="成本数据是否不可用")

    # 降级
    is_fallback: bool = Field(default=False, description="是否为降级调用")
    fallback_reason: str = Field(default="", description="降级原因说明")


class Message(BaseModel):
    """对话消息"""

    role: str = Field(description="user / assistant / system")
    content: str = Field(description="消息内容")


class CompletionRequest(BaseModel):
    """补全请求：系统指令 + 有序消息列表"""

    system_prompt: str = Field(default="", description="系统指令")
    messages: list[Message] = Field(min_length=1, description="有序消息列表")
    model_alias: str = Field(default="planner", description="语义 alias")
    max_tokens: int | None = Field(default=None, ge=1, description="最大生成 token 数")
    temperature: float = Field(default=0.2, ge=0.0, le=2.0, description="采样温度")

    def to_chat_messages(self) -> list[dict[str, str]]:
        """转换为 chat completion messages 格式，系统指令置首"""
        chat: list[dict[str, str]] = []
        if self.system_prompt:
            chat.append({"role": "system", "content": self.system_prompt})
        chat.extend({"role": m.role, "content": m.content} for m in self.messages)
        return chat


class CompletionResponse(BaseModel):
    """补全响应：自由文本 + token 统计 + 结束原因

    服务本身不约束输出结构，结构恢复由 planner 负责。
    """

    content: str = Field(description="自由文本输出")
    usage: TokenUsage = Field(default_factory=TokenUsage, description="Token 统计")
    stop_reason: str = Field(default="", description="结束原因")
    model_name: str = Field(default="", description="实际模型")
    provider: str = Field(default="", description="实际 provider")
    duration_ms: int = Field(default=0, ge=0, description="耗时（毫秒）")
    cost_usd: float = Field(default=0.0, ge=0.0, description="USD 成本")
    is_fallback: bool = Field(default=False, description="是否来自降级后端")
