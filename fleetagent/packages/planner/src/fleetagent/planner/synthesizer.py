"""Phased Rollout Plan Synthesizer -- 确定性金丝雀 + 波次 + 回滚计划

提取失败时的安全兜底，也是生成计划应当接近的形态。
阶段顺序：预检（0%，不回滚）-> 金丝雀 -> 波次 1..k -> 发布后验证（100%，不回滚）。
asset_percentage 为累计覆盖率，从金丝雀起严格递增。
"""

import math

from fleetagent.core.config import MAX_ROLLOUT_WAVES, get_notify_channel
from fleetagent.core.models import (
    NotificationMatrix,
    Phase,
    Plan,
    PlanProvenance,
    RiskLevel,
    RollbackPolicy,
    TaskConstraints,
)
from pydantic import BaseModel, Field

# 各阶段预计耗时（分钟）
PREFLIGHT_MINUTES = 5
CANARY_MINUTES = 15
WAVE_MINUTES = 20
WAVE_SLOT_MINUTES = 25  # 波次耗时 + 波次间健康检查
VALIDATION_MINUTES = 10
ROLLBACK_MINUTES = 15

ROLLBACK_TRIGGERS = ["error_rate > 5%", "health_check_failure", "manual"]


class RolloutSizing(BaseModel):
    """发布规模参数"""

    asset_count: int = Field(ge=0)
    canary_pct: int = Field(ge=1, le=100)
    wave_pct: int = Field(ge=1, le=100)
    wave_size: int = Field(ge=1, description="每波资产数")


def default_percentages(risk: RiskLevel) -> tuple[int, int]:
    """风险等级对应的 (金丝雀%, 波次%)"""
    if risk in (RiskLevel.CRITICAL, RiskLevel.HIGH):
        return 2, 10
    if risk == RiskLevel.LOW:
        return 10, 50
    return 5, 25


def compute_sizing(
    asset_count: int,
    risk: RiskLevel,
    constraints: TaskConstraints | None = None,
) -> RolloutSizing:
    """计算发布规模

    constraints.canary_size 覆盖金丝雀百分比；
    constraints.max_batch_size 覆盖每波资产数。
    """
    canary_pct, wave_pct = default_percentages(risk)
    if constraints is not None and constraints.canary_size:
        canary_pct = constraints.canary_size

    wave_size = max(1, asset_count * wave_pct // 100)
    if constraints is not None and constraints.max_batch_size:
        wave_size = constraints.max_batch_size

    return RolloutSizing(
        asset_count=asset_count,
        canary_pct=canary_pct,
        wave_pct=wave_pct,
        wave_size=wave_size,
    )


def split_waves(remaining: int, wave_size: int, max_waves: int = MAX_ROLLOUT_WAVES) -> list[int]:
    """把剩余资产切分为波次

    波次数 = ceil(remaining / wave_size)，硬上限 max_waves，余量并入最后一波。
    """
    if remaining <= 0:
        return []
    count = min(math.ceil(remaining / wave_size), max_waves)
    waves = [wave_size] * (count - 1)
    waves.append(remaining - wave_size * (count - 1))
    return waves


def _percent(done: int, total: int) -> float:
    if total <= 0:
        return 100.0
    return done * 100 / total


def synthesize_rollout_plan(
    asset_count: int,
    risk: RiskLevel = RiskLevel.MEDIUM,
    constraints: TaskConstraints | None = None,
    name: str = "phased-rollout",
    summary: str = "",
) -> Plan:
    """构建确定性的分阶段发布计划

    Args:
        asset_count: 资产总数
        risk: 风险等级（决定默认金丝雀/波次比例）
        constraints: 约束覆盖
        name: 计划名称
        summary: 计划摘要，为空时自动生成

    Returns:
        provenance=synthesized 的 Plan
    """
    asset_count = max(asset_count, 0)
    sizing = compute_sizing(asset_count, risk, constraints)

    canary = min(max(1, asset_count * sizing.canary_pct // 100), asset_count)
    waves = split_waves(asset_count - canary, sizing.wave_size)

    phases = [
        Phase(
            name="Pre-flight Checks",
            type="validation",
            description="Verify connectivity, disk space and backups before any change",
            asset_percentage=0,
            asset_count=0,
            checks=["connectivity", "disk_space", "backup_status"],
            rollback_on_failure=False,
            duration_minutes=PREFLIGHT_MINUTES,
        ),
        Phase(
            name="Canary Deployment",
            type="canary",
            description=f"Deploy to {canary} canary assets ({sizing.canary_pct}%)",
            asset_percentage=_percent(canary, asset_count),
            asset_count=canary,
            success_criteria={"error_rate": "<1%", "health_status": "healthy"},
            rollback_on_failure=True,
            duration_minutes=CANARY_MINUTES,
            health_check_wait_minutes=5,
        ),
    ]

    done = canary
    for i, size in enumerate(waves, start=1):
        done += size
        phases.append(
            Phase(
                name=f"Wave {i}",
                type="wave",
                description=f"Deploy to {size} assets",
                asset_percentage=_percent(done, asset_count),
                asset_count=size,
                success_criteria={"error_rate": "<2%", "health_status": "healthy"},
                rollback_on_failure=True,
                duration_minutes=WAVE_MINUTES,
                health_check_wait_minutes=5,
            )
        )

    phases.append(
        Phase(
            name="Post-Rollout Validation",
            type="validation",
            description="Confirm fleet health after rollout",
            asset_percentage=100,
            asset_count=asset_count,
            checks=["health_check", "service_status", "log_errors"],
            rollback_on_failure=False,
            duration_minutes=VALIDATION_MINUTES,
        )
    )

    channel = get_notify_channel()
    total_minutes = PREFLIGHT_MINUTES + CANARY_MINUTES + len(waves) * WAVE_SLOT_MINUTES + VALIDATION_MINUTES

    return Plan(
        name=name,
        summary=summary
        or f"Phased rollout for {asset_count} assets: {canary} canary, {len(waves)} waves",
        phases=phases,
        rollback_policy=RollbackPolicy(
            type="automatic",
            triggers=list(ROLLBACK_TRIGGERS),
            procedure="Revert affected assets to the previous golden image version",
            estimated_minutes=ROLLBACK_MINUTES,
        ),
        notifications=NotificationMatrix(
            on_start=[channel],
            on_phase_complete=[channel],
            on_failure=[channel, "email"],
            on_complete=[channel, "email"],
        ),
        estimated_duration=f"{total_minutes} minutes",
        provenance=PlanProvenance.SYNTHESIZED,
    )
