"""工具结果读取模型

工具返回值本身是开放结构（原样进入 evidence 审计）。Worker 需要读取的
字段通过这里的模型做一次校验：read_result() 成功返回模型，失败返回 None，
由 Worker 决定使用占位值。
"""

from typing import Any, TypeVar

import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, model_validator

log = structlog.get_logger()

ResultT = TypeVar("ResultT", bound=BaseModel)

# 不做 schema 约束的透传数据（审计证据）
OpaquePayload = Any


class _Reader(BaseModel):
    model_config = ConfigDict(extra="ignore")


class AssetInventory(_Reader):
    """query_assets 结果：接受资产列表或 {"assets": [...], "total": n}"""

    assets: list[dict[str, Any]] = Field(default_factory=list)
    total: int = Field(default=0, ge=0, validation_alias=AliasChoices("total", "count"))

    @model_validator(mode="before")
    @classmethod
    def _accept_list(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"assets": data, "total": len(data)}
        return data

    @property
    def count(self) -> int:
        return max(self.total, len(self.assets))


class GoldenImage(_Reader):
    """get_golden_image 结果"""

    family: str = ""
    version: str = ""
    image_id: str = ""


class RiskScore(_Reader):
    """calculate_risk_score 结果"""

    risk_level: str = "medium"
    score: float = Field(default=50.0, ge=0.0, le=100.0)


class ComplianceStatus(_Reader):
    """get_compliance_status 结果"""

    status: str = "unknown"
    score: float | None = None
    critical_count: int = Field(default=0, ge=0)
    high_count: int = Field(default=0, ge=0)
    medium_count: int = Field(default=0, ge=0)


class ControlCheck(_Reader):
    """check_control 结果"""

    passed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    controls: list[dict[str, Any]] = Field(default_factory=list)


class DRStatus(_Reader):
    """get_dr_status 结果"""

    readiness_score: float = Field(default=50.0, ge=0.0, le=100.0)
    sites: list[dict[str, Any]] = Field(default_factory=list)
    last_drill: str | None = None


class CertificateSummary(_Reader):
    id: str
    common_name: str = ""
    days_until_expiry: int = 0
    issuer: str = ""


class CertificateListing(_Reader):
    """list_certificates 结果"""

    certificates: list[CertificateSummary] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_list(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"certificates": data}
        return data


class BlastRadius(_Reader):
    """map_certificate_usage / get_cve_blast_radius 结果"""

    risk_level: str = "medium"
    total_usages: int = Field(default=0, ge=0, validation_alias=AliasChoices("total_usages", "affected_assets"))
    production_count: int = Field(default=0, ge=0)


class TLSValidation(_Reader):
    """validate_tls_handshake 结果"""

    endpoint: str = ""
    valid: bool = False
    error: str = ""


class CVEDetails(_Reader):
    """get_cve_details 结果"""

    cve_id: str
    severity: str = "unknown"
    cvss_score: float | None = Field(default=None, ge=0.0, le=10.0)
    urgency_score: int = Field(default=50, ge=0, le=100)
    exploited_in_wild: bool = False
    fixed_version: str = ""


class SOPDocument(_Reader):
    """generate_sop 结果：接受 SOP 本体或 {"sop": {...}} 包装

    保留未声明字段，SOP 原样传给 validate_sop / simulate_sop。
    """

    model_config = ConfigDict(extra="allow")

    name: str = ""
    steps: list[Any] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _unwrap(cls, data: Any) -> Any:
        if isinstance(data, dict) and "sop" in data:
            return data["sop"]
        return data


class ImageContract(_Reader):
    """generate_image_contract 结果：接受契约本体或 {"contract": {...}} 包装"""

    model_config = ConfigDict(extra="allow")

    name: str = ""

    @model_validator(mode="before")
    @classmethod
    def _unwrap(cls, data: Any) -> Any:
        if isinstance(data, dict) and "contract" in data:
            return data["contract"]
        return data


def read_result(model: type[ResultT], raw: Any) -> ResultT | None:
    """按模型读取工具结果，校验失败返回 None 并记录 debug 日志"""
    if raw is None:
        return None
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        log.debug("tool_result_unreadable", model=model.__name__, error=str(e))
        return None
