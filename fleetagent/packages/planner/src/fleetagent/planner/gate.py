"""Quality/Risk Scorer & HITL Gate

所有 Worker 结果在返回调用方前都必须经过 finalize()：
应用解析质量上限、计算质量等级、决定是否强制人工审批。
"""

from fleetagent.core.config import HITL_QUALITY_THRESHOLD, PARSE_QUALITY_CAP
from fleetagent.core.models import (
    HIGH_RISK_LEVELS,
    UNTRUSTED_PARSE_METHODS,
    AgentResult,
    ParseMethod,
    Plan,
    QualityLevel,
    TaskSpec,
)


def quality_level(score: float) -> QualityLevel:
    if score >= 90:
        return QualityLevel.EXCELLENT
    if score >= 70:
        return QualityLevel.GOOD
    if score >= 50:
        return QualityLevel.FAIR
    return QualityLevel.POOR


def score_plan(plan: Plan | None) -> float:
    """计划完整度启发式评分 [0,100]

    评分项：
    - 至少一个阶段（30）
    - 回滚策略带触发条件（20，无触发条件 10）
    - 各阶段带检查项或成功标准（按比例 15）
    - 存在金丝雀阶段或仅单批执行（10）
    - 失败通知（10）
    - 预计耗时（5）
    - 风险评估（5）
    - 摘要（5）
    """
    if plan is None or not plan.phases:
        return 0.0

    score = 30.0
    score += 20.0 if plan.rollback_policy.triggers else 10.0

    verified = sum(1 for p in plan.phases if p.checks or p.success_criteria)
    score += 15.0 * verified / len(plan.phases)

    has_canary = any(p.type == "canary" or "canary" in p.name.lower() for p in plan.phases)
    if has_canary or len(plan.phases) <= 3:
        score += 10.0
    if plan.notifications.on_failure:
        score += 10.0
    if plan.estimated_duration:
        score += 5.0
    if plan.risk_assessment is not None:
        score += 5.0
    if plan.summary:
        score += 5.0
    return min(score, 100.0)


def apply_parse_cap(score: float, method: ParseMethod) -> float:
    """非 direct 解析的结果质量分不超过上限"""
    if method != ParseMethod.DIRECT:
        return min(score, PARSE_QUALITY_CAP)
    return score


def should_require_hitl(result: AgentResult) -> bool:
    """是否必须人工审批（纯函数）

    任一条件成立即需要审批：
    1. 质量分 < 50
    2. 风险等级为 high / critical
    3. 解析层级为 extracted / lenient
    4. 存在执行错误
    """
    if result.quality_score < HITL_QUALITY_THRESHOLD:
        return True
    if result.risk_level in HIGH_RISK_LEVELS:
        return True
    if result.parse_method in UNTRUSTED_PARSE_METHODS:
        return True
    return bool(result.errors)


def finalize(result: AgentResult, task: TaskSpec) -> AgentResult:
    """计算派生字段，返回新副本

    Args:
        result: Worker 产出的结果
        task: 原始任务（hitl_required=True 时保持强制审批）

    Returns:
        应用上限后的 AgentResult
    """
    capped = apply_parse_cap(result.quality_score, result.parse_method)
    staged = result.model_copy(
        update={
            "quality_score": capped,
            "quality_level": quality_level(capped),
        }
    )
    hitl = should_require_hitl(staged) or task.hitl_required
    return staged.model_copy(update={"hitl_required": hitl})
