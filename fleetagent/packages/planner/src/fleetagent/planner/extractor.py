"""Resilient Plan Extractor -- 从补全服务的自由文本中恢复结构化计划

分层策略（按顺序，首个成功者胜出）:
    1. direct:    整段文本直接解析为 JSON
    2. extracted: markdown 代码块内的 JSON；否则全文首个 { 起的深度匹配片段
    3. lenient:   对候选文本做容错修复（尾逗号、单引号、未加引号的 key、注释）
    4. failed:    无可恢复内容

JSON 恢复之后再做一次 schema 校验（Plan 或 Worker 自定义模型），
校验失败得到显式的 VALIDATION_FAILED 结果，由调用方转入确定性合成兜底。
提取错误从不向调用方抛出。
"""

import json
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, TypeVar

import structlog
from fleetagent.core.models import ParseMethod, Plan, PlanProvenance
from pydantic import BaseModel, ValidationError

log = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)

WARN_FENCED = "JSON was extracted from markdown code block"
WARN_SURROUNDED = "JSON was extracted from surrounding text"
WARN_LENIENT = "JSON required error recovery"
WARN_SYNTHESIZED = "plan synthesized from deterministic fallback"

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
# 行注释：// 前不能是 ':'（避免误伤 URL）或引号
_LINE_COMMENT_RE = re.compile(r'(?m)(?<![:"\w])//[^\n]*$')
_UNQUOTED_KEY_RE = re.compile(r"(?m)([{,]\s*|^\s*)([A-Za-z_][\w\-]*)\s*:")


@dataclass(frozen=True)
class JSONExtraction:
    """JSON 提取结果"""

    method: ParseMethod
    data: Any = None
    warning: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.method != ParseMethod.FAILED


def _loads_container(text: str) -> tuple[bool, Any]:
    """解析 JSON，仅接受 object / array"""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return False, None
    return isinstance(data, dict | list), data


def find_json_segment(text: str) -> str:
    """定位首个 { 起、花括号深度匹配闭合的片段

    正文里的方括号（如 [production]）不作为起点。
    字符串字面量中的括号与转义字符不计入深度。
    未闭合（常见于输出被截断）时返回空字符串。
    """
    start = text.find("{")
    if start < 0:
        return ""

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if escaped:
            escaped = False
            continue
        if ch == "\\" and in_string:
            escaped = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return ""


def repair_json(text: str) -> str:
    """容错修复：注释、尾逗号、单引号、未加引号的 key"""
    repaired = _BLOCK_COMMENT_RE.sub("", text)
    repaired = _LINE_COMMENT_RE.sub("", repaired)
    repaired = _TRAILING_COMMA_RE.sub(r"\1", repaired)
    if '"' not in repaired:
        repaired = repaired.replace("'", '"')
    repaired = _UNQUOTED_KEY_RE.sub(r'\1"\2":', repaired)
    return repaired


def _fenced_blocks(text: str) -> list[str]:
    return [m.group(1).strip() for m in _FENCE_RE.finditer(text) if m.group(1).strip()]


def extract_json(text: str) -> JSONExtraction:
    """按层级从文本中提取 JSON"""
    stripped = (text or "").strip()
    if not stripped:
        return JSONExtraction(method=ParseMethod.FAILED, error="empty response")

    # 层级 1: direct
    ok, data = _loads_container(stripped)
    if ok:
        return JSONExtraction(method=ParseMethod.DIRECT, data=data)

    # 层级 2: extracted（代码块优先，其次全文括号匹配）
    fenced = _fenced_blocks(stripped)
    for block in fenced:
        ok, data = _loads_container(block)
        if ok:
            return JSONExtraction(method=ParseMethod.EXTRACTED, data=data, warning=WARN_FENCED)

    # 代码块可能是 bash 等非 JSON 内容，片段从全文定位
    segment = find_json_segment(stripped)
    if segment:
        ok, data = _loads_container(segment)
        if ok:
            return JSONExtraction(method=ParseMethod.EXTRACTED, data=data, warning=WARN_SURROUNDED)

    # 层级 3: lenient
    for candidate in (segment, *fenced, stripped):
        if not candidate:
            continue
        ok, data = _loads_container(repair_json(candidate))
        if ok:
            return JSONExtraction(method=ParseMethod.LENIENT, data=data, warning=WARN_LENIENT)

    return JSONExtraction(
        method=ParseMethod.FAILED,
        error="no valid JSON found in response",
    )


class ParseStatus(StrEnum):
    """schema 校验阶段的状态"""

    PARSED = "parsed"
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ParseOutcome(Generic[ModelT]):
    """提取 + 校验的结果"""

    status: ParseStatus
    method: ParseMethod
    value: ModelT | None = None
    warning: str = ""
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == ParseStatus.PARSED


def parse_model(text: str, model: type[ModelT]) -> ParseOutcome[ModelT]:
    """提取 JSON 并按模型校验"""
    extraction = extract_json(text)
    if not extraction.ok:
        return ParseOutcome(
            status=ParseStatus.NOT_FOUND,
            method=ParseMethod.FAILED,
            errors=[extraction.error],
        )

    try:
        value = model.model_validate(extraction.data)
    except ValidationError as e:
        return ParseOutcome(
            status=ParseStatus.VALIDATION_FAILED,
            method=extraction.method,
            warning=extraction.warning,
            errors=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
        )

    return ParseOutcome(
        status=ParseStatus.PARSED,
        method=extraction.method,
        value=value,
        warning=extraction.warning,
    )


@dataclass(frozen=True)
class PlanResolution:
    """计划解析最终结果：总能给出可用计划"""

    plan: Plan
    method: ParseMethod
    warning: str = ""
    errors: list[str] = field(default_factory=list)

    @property
    def synthesized(self) -> bool:
        return self.plan.provenance == PlanProvenance.SYNTHESIZED


def resolve_plan(text: str, fallback: Callable[[], Plan]) -> PlanResolution:
    """解析生成计划，失败时替换为确定性合成计划并标记 lenient

    Args:
        text: 补全服务原始输出
        fallback: 产出合成计划的无参函数

    Returns:
        PlanResolution
    """
    outcome = parse_model(text, Plan)
    if outcome.ok:
        plan = outcome.value.model_copy(update={"provenance": PlanProvenance.GENERATED})
        return PlanResolution(plan=plan, method=outcome.method, warning=outcome.warning)

    log.warning(
        "plan_extraction_fallback",
        status=outcome.status.value,
        method=outcome.method.value,
        errors=outcome.errors[:5],
    )
    plan = fallback().model_copy(update={"provenance": PlanProvenance.SYNTHESIZED})
    return PlanResolution(
        plan=plan,
        method=ParseMethod.LENIENT,
        warning=WARN_SYNTHESIZED,
        errors=outcome.errors,
    )


def resolve_report(text: str, fallback: Callable[[], Plan]) -> PlanResolution:
    """报告类输出的解析

    输出本身是完整计划时按生成计划处理；否则把提取出的 JSON object
    作为 report 挂到默认计划上，解析层级沿用提取层级；
    都失败时与 resolve_plan 相同，标记 lenient。
    """
    outcome = parse_model(text, Plan)
    if outcome.ok:
        plan = outcome.value.model_copy(update={"provenance": PlanProvenance.GENERATED})
        return PlanResolution(plan=plan, method=outcome.method, warning=outcome.warning)

    extraction = extract_json(text)
    if extraction.ok and isinstance(extraction.data, dict):
        base = fallback()
        summary = extraction.data.get("summary")
        plan = base.model_copy(
            update={
                "report": extraction.data,
                "summary": summary if isinstance(summary, str) and summary else base.summary,
                "provenance": PlanProvenance.SYNTHESIZED,
            }
        )
        return PlanResolution(plan=plan, method=extraction.method, warning=extraction.warning)

    log.warning(
        "report_extraction_fallback",
        method=extraction.method.value,
        error=extraction.error,
    )
    plan = fallback().model_copy(update={"provenance": PlanProvenance.SYNTHESIZED})
    return PlanResolution(
        plan=plan,
        method=ParseMethod.LENIENT,
        warning=WARN_SYNTHESIZED,
        errors=[extraction.error] if extraction.error else [],
    )
