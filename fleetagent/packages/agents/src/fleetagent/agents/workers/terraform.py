"""Terraform Worker -- 基础设施模块生成

需求由 LLM 解析为 TerraformRequirements，失败时按关键词推断
（默认 aws / compute / t3.medium / 1 台）。模块文档按 provider 模板
确定性生成，连同 provisioning contract 放入计划的 report。
"""

import json
import re
from typing import Literal

import structlog
from fleetagent.core.models import AgentResult, ParseMethod, RiskLevel, TaskSpec, TaskType
from fleetagent.planner import WARN_SYNTHESIZED, parse_model
from pydantic import BaseModel, ConfigDict, Field

from ..base import BaseWorker, decision_actions

log = structlog.get_logger()

CloudProvider = Literal["aws", "azure", "gcp"]

DEFAULT_INSTANCE_TYPES: dict[str, str] = {
    "aws": "t3.medium",
    "azure": "Standard_B2s",
    "gcp": "e2-medium",
}
DEFAULT_REGIONS: dict[str, str] = {
    "aws": "us-east-1",
    "azure": "eastus",
    "gcp": "us-central1",
}

_COUNT_RE = re.compile(r"(\d+)\s*(?:x\s*)?(?:instances|vms|servers|nodes|machines)")
_INSTANCE_RE = re.compile(r"\b([a-z]\d[a-z]?\.(?:nano|micro|small|medium|large|\d*xlarge))\b")


class TerraformRequirements(BaseModel):
    """基础设施需求"""

    model_config = ConfigDict(extra="ignore")

    provider: CloudProvider = "aws"
    resource_type: str = "compute"
    name: str = "fleet-workload"
    instance_type: str = ""
    count: int = Field(default=1, ge=1, le=1000)
    region: str = ""
    tags: dict[str, str] = Field(default_factory=dict)

    def resolved(self) -> "TerraformRequirements":
        """补齐 provider 相关默认值"""
        return self.model_copy(
            update={
                "instance_type": self.instance_type or DEFAULT_INSTANCE_TYPES[self.provider],
                "region": self.region or DEFAULT_REGIONS[self.provider],
            }
        )


REQUIREMENTS_INSTRUCTIONS = """Output ONLY valid JSON (no markdown, no explanation):
{
  "provider": "aws|azure|gcp",
  "resource_type": "compute|network|storage|database",
  "name": "resource name prefix",
  "instance_type": "e.g. t3.medium",
  "count": 1,
  "region": "e.g. us-east-1",
  "tags": {"team": "..."}
}"""


def fallback_requirements(text: str, platforms: list[str]) -> TerraformRequirements:
    """关键词推断需求"""
    provider: CloudProvider = "aws"
    candidates = " ".join(platforms).lower() + " " + text
    if "azure" in candidates:
        provider = "azure"
    elif "gcp" in candidates or "google" in candidates:
        provider = "gcp"

    resource_type = "compute"
    for keyword, kind in (("vpc", "network"), ("network", "network"), ("bucket", "storage"), ("database", "database")):
        if keyword in text:
            resource_type = kind
            break

    count_match = _COUNT_RE.search(text)
    instance_match = _INSTANCE_RE.search(text) if provider == "aws" else None
    return TerraformRequirements(
        provider=provider,
        resource_type=resource_type,
        count=int(count_match.group(1)) if count_match else 1,
        instance_type=instance_match.group(1) if instance_match else "",
    )


def hcl_string(value: str) -> str:
    """HCL 字符串字面量：转义引号与反斜杠，${ / %{ 不作为模板插值"""
    return json.dumps(value).replace("${", "$${").replace("%{", "%%{")


def _tags_block(req: TerraformRequirements, indent: str) -> str:
    tags = {"managed_by": "fleetagent", **req.tags}
    return "\n".join(f"{indent}{hcl_string(k)} = {hcl_string(v)}" for k, v in sorted(tags.items()))


def render_module(req: TerraformRequirements) -> dict[str, str]:
    """按 provider 生成 main.tf / variables.tf / outputs.tf"""
    variables = "\n".join(
        [
            'variable "name" {',
            "  type    = string",
            f"  default = {hcl_string(req.name)}",
            "}",
            "",
            'variable "instance_count" {',
            "  type    = number",
            f"  default = {req.count}",
            "}",
            "",
            'variable "instance_type" {',
            "  type    = string",
            f"  default = {hcl_string(req.instance_type)}",
            "}",
            "",
            'variable "region" {',
            "  type    = string",
            f"  default = {hcl_string(req.region)}",
            "}",
        ]
    )

    if req.provider == "aws":
        main = "\n".join(
            [
                'provider "aws" {',
                "  region = var.region",
                "}",
                "",
                'resource "aws_instance" "this" {',
                "  count         = var.instance_count",
                "  ami           = var.ami_id",
                "  instance_type = var.instance_type",
                "  tags = {",
                '    Name = "${var.name}-${count.index}"',
                _tags_block(req, "    "),
                "  }",
                "}",
            ]
        )
        variables += '\n\nvariable "ami_id" {\n  type = string\n}'
        outputs = 'output "instance_ids" {\n  value = aws_instance.this[*].id\n}'
    elif req.provider == "azure":
        main = "\n".join(
            [
                'provider "azurerm" {',
                "  features {}",
                "}",
                "",
                'resource "azurerm_linux_virtual_machine" "this" {',
                "  count               = var.instance_count",
                '  name                = "${var.name}-${count.index}"',
                "  location            = var.region",
                "  resource_group_name = var.resource_group_name",
                "  size                = var.instance_type",
                "  tags = {",
                _tags_block(req, "    "),
                "  }",
                "}",
            ]
        )
        variables += '\n\nvariable "resource_group_name" {\n  type = string\n}'
        outputs = 'output "vm_ids" {\n  value = azurerm_linux_virtual_machine.this[*].id\n}'
    else:
        main = "\n".join(
            [
                'provider "google" {',
                "  region = var.region",
                "}",
                "",
                'resource "google_compute_instance" "this" {',
                "  count        = var.instance_count",
                '  name         = "${var.name}-${count.index}"',
                "  machine_type = var.instance_type",
                '  zone         = "${var.region}-a"',
                "  labels = {",
                _tags_block(req, "    "),
                "  }",
                "}",
            ]
        )
        outputs = 'output "instance_ids" {\n  value = google_compute_instance.this[*].id\n}'

    return {"main.tf": main, "variables.tf": variables, "outputs.tf": outputs}


def provisioning_contract(req: TerraformRequirements, environment: str) -> dict:
    return {
        "provider": req.provider,
        "resource_type": req.resource_type,
        "region": req.region,
        "instance_type": req.instance_type,
        "count": req.count,
        "environment": environment,
        "state_backend": "remote",
        "requires_plan_review": True,
    }


class TerraformWorker(BaseWorker):
    name = "terraform_agent"
    description = "Generates Terraform modules and provisioning contracts"
    supported_tasks = (TaskType.TERRAFORM_GENERATION,)
    system_prompt = (
        "You are an infrastructure-as-code specialist. Parse requirements into structured "
        "JSON. Output ONLY valid JSON."
    )

    async def execute(self, task: TaskSpec) -> AgentResult:
        run = self.new_run(task)

        content = await run.complete(
            "\n".join(
                [
                    "You are the FleetAgent Terraform Worker. Extract infrastructure requirements.",
                    "",
                    self.task_block(task),
                    "",
                    REQUIREMENTS_INSTRUCTIONS,
                ]
            ),
            model_alias="extractor",
        )
        outcome = parse_model(content, TerraformRequirements)
        if outcome.ok:
            requirements = outcome.value
            method, warning = outcome.method, outcome.warning
        else:
            log.warning("terraform_requirements_fallback", task_id=task.id, errors=outcome.errors[:5])
            requirements = fallback_requirements(task.intent_text, task.context.platforms)
            method, warning = ParseMethod.LENIENT, WARN_SYNTHESIZED
        requirements = requirements.resolved()

        module = render_module(requirements)
        contract = provisioning_contract(requirements, task.environment)
        run.evidence["requirements"] = requirements.model_dump()

        risk = RiskLevel.HIGH if task.environment == "production" else task.risk_level
        plan = run.fallback_plan(requirements.count, risk)()
        plan = plan.model_copy(
            update={
                "summary": f"Provision {requirements.count} {requirements.resource_type} resources on {requirements.provider}",
                "report": {"module": module, "contract": contract},
            }
        )
        return run.build(
            plan=plan,
            summary=f"Generated Terraform module for {requirements.provider} ({requirements.count} x {requirements.instance_type})",
            affected_assets=requirements.count,
            risk=risk,
            parse_method=method,
            parse_warning=warning,
            actions=decision_actions(
                ("Approve & Apply", "Approve and apply infrastructure changes"),
                ("Modify Modules", "Edit Terraform modules before applying"),
                ("Reject", "Reject and discard"),
            ),
        )
