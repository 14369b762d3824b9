"""工具参数模型 -- 每个核心工具一个强类型参数结构

未声明的键原样透传（extra="allow"），远端工具自行解释。
PARAMS_BY_TOOL 提供 名称 -> 参数模型 的映射，供远端工具注册使用。
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ToolParams(BaseModel):
    """工具参数基类：所有工具按组织隔离"""

    model_config = ConfigDict(extra="allow")

    org_id: str = Field(description="组织 ID")


# ---- 资产与镜像 ----


class QueryAssetsParams(ToolParams):
    filter: str = Field(default="", description="资产过滤表达式")
    platform: str | None = None
    environment: str | None = None
    limit: int | None = Field(default=None, ge=1)


class GoldenImageParams(ToolParams):
    environment: str = ""
    family: str | None = None


class DriftStatusParams(ToolParams):
    environment: str | None = None


class CompareVersionsParams(ToolParams):
    current_version: str = ""
    target_version: str = ""


class RiskScoreParams(ToolParams):
    environment: str = ""
    asset_count: int = Field(default=0, ge=0)
    asset_filter: str = ""


class SimulateRolloutParams(ToolParams):
    plan: dict[str, Any] = Field(default_factory=dict)
    environment: str = ""


# ---- 合规 ----


class ComplianceStatusParams(ToolParams):
    framework: str | None = None


class CheckControlParams(ToolParams):
    framework: str
    control_id: str | None = None


class ComplianceEvidenceParams(ToolParams):
    frameworks: list[str] = Field(default_factory=list)
    format: str = "json"


# ---- 告警与 DR ----


class QueryAlertsParams(ToolParams):
    severity: str | None = None
    status: str = "open"


class DRStatusParams(ToolParams):
    site_id: str | None = None


class DRRunbookParams(ToolParams):
    scenario: str = "regional_failover"


class SimulateFailoverParams(ToolParams):
    dry_run: bool = True
    scenario: str = "regional_failover"


# ---- 证书 ----


class ListCertificatesParams(ToolParams):
    expiring_within_days: int = Field(default=30, ge=1)


class CertificateDetailsParams(ToolParams):
    certificate_id: str


class CertificateUsageParams(ToolParams):
    certificate_id: str


class CertRenewalPlanParams(ToolParams):
    certificate_id: str
    renewal_type: str = "auto"
    strategy: str = "rolling"


class TLSHandshakeParams(ToolParams):
    endpoint: str


# ---- 镜像 / SOP 生成 ----


class ImageContractParams(ToolParams):
    requirements: dict[str, Any] = Field(default_factory=dict)


class PackerTemplateParams(ToolParams):
    platform: str
    contract: dict[str, Any] = Field(default_factory=dict)


class AnsiblePlaybookParams(ToolParams):
    contract: dict[str, Any] = Field(default_factory=dict)


class PromoteImageParams(ToolParams):
    image_family: str = ""
    target_environment: str = "production"


class ListImagesParams(ToolParams):
    family: str | None = None


class GenerateSOPParams(ToolParams):
    requirements: dict[str, Any] = Field(default_factory=dict)


class SOPRefParams(ToolParams):
    sop: dict[str, Any] = Field(default_factory=dict)


# ---- 漏洞 ----


class CVEDetailsParams(ToolParams):
    cve_id: str


class CVEBlastRadiusParams(ToolParams):
    cve_id: str


PARAMS_BY_TOOL: dict[str, type[ToolParams]] = {
    "query_assets": QueryAssetsParams,
    "get_golden_image": GoldenImageParams,
    "get_drift_status": DriftStatusParams,
    "compare_versions": CompareVersionsParams,
    "calculate_risk_score": RiskScoreParams,
    "simulate_rollout": SimulateRolloutParams,
    "get_compliance_status": ComplianceStatusParams,
    "check_control": CheckControlParams,
    "generate_compliance_evidence": ComplianceEvidenceParams,
    "query_alerts": QueryAlertsParams,
    "get_dr_status": DRStatusParams,
    "generate_dr_runbook": DRRunbookParams,
    "simulate_failover": SimulateFailoverParams,
    "list_certificates": ListCertificatesParams,
    "get_certificate_details": CertificateDetailsParams,
    "map_certificate_usage": CertificateUsageParams,
    "generate_cert_renewal_plan": CertRenewalPlanParams,
    "validate_tls_handshake": TLSHandshakeParams,
    "generate_image_contract": ImageContractParams,
    "generate_packer_template": PackerTemplateParams,
    "generate_ansible_playbook": AnsiblePlaybookParams,
    "promote_image": PromoteImageParams,
    "list_images": ListImagesParams,
    "generate_sop": GenerateSOPParams,
    "validate_sop": SOPRefParams,
    "simulate_sop": SOPRefParams,
    "get_cve_details": CVEDetailsParams,
    "get_cve_blast_radius": CVEBlastRadiusParams,
}
