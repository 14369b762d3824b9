"""Image Worker -- 黄金镜像构建 / 发布 / 查询

operation 按关键词判定：promote / publish -> promote；
list / show / versions -> list；其余 create。
promote 与 list 只执行一次工具调用并直接 completed。
"""

from typing import Any

import structlog
from fleetagent.core.models import (
    READ_ONLY_ACTIONS,
    AgentResult,
    AgentStatus,
    ParseMethod,
    TaskSpec,
    TaskType,
)
from fleetagent.planner import WARN_SYNTHESIZED, parse_model
from fleetagent.tools.results import ImageContract, read_result
from pydantic import BaseModel, ConfigDict, Field

from ..base import BaseWorker, WorkerRun, contains_any, decision_actions

log = structlog.get_logger()

# promote / list 为单次工具调用，结果确定
LOOKUP_QUALITY = 90.0


class ImageRequirements(BaseModel):
    """镜像需求（LLM 解析或关键词兜底）"""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    os: str = "ubuntu"
    os_version: str = "22.04"
    purpose: str = "base"
    cis_level: int = Field(default=1, ge=1, le=2)
    platforms: list[str] = Field(default_factory=lambda: ["aws"])
    runtimes: list[str] = Field(default_factory=list)
    packages: list[str] = Field(default_factory=list)
    compliance: list[str] = Field(default_factory=lambda: ["CIS"])


REQUIREMENTS_INSTRUCTIONS = """## Available Options
- OS: ubuntu, rhel, amazon-linux, windows
- CIS Levels: 1 (basic), 2 (stricter)
- Platforms: aws, azure, gcp, docker, vsphere

Output ONLY valid JSON (no markdown, no explanation):
{
  "name": "string",
  "os": "ubuntu|rhel|amazon-linux|windows",
  "os_version": "string",
  "purpose": "string",
  "cis_level": 1,
  "platforms": ["aws"],
  "runtimes": ["python:3.12"],
  "packages": ["nginx"],
  "compliance": ["CIS"]
}"""


def determine_operation(text: str) -> str:
    if contains_any(text, ("promote", "publish")):
        return "promote"
    if contains_any(text, ("list", "show", "versions")):
        return "list"
    return "create"


def fallback_requirements(text: str, platforms: list[str]) -> ImageRequirements:
    """关键词推断镜像需求"""
    os_name, os_version, purpose, cis_level = "ubuntu", "22.04", "base", 1
    if contains_any(text, ("rhel", "redhat")):
        os_name, os_version = "rhel", "8.9"
    if "amazon" in text:
        os_name, os_version = "amazon-linux", "2"
    if "web" in text:
        purpose = "web-server"
    if contains_any(text, ("database", " db")):
        purpose = "database"
    if contains_any(text, ("kubernetes", "k8s")):
        purpose = "k8s-node"
    if contains_any(text, ("cis-2", "level 2", "strict")):
        cis_level = 2
    return ImageRequirements(
        name=f"{os_name}-{purpose}-base",
        os=os_name,
        os_version=os_version,
        purpose=purpose,
        cis_level=cis_level,
        platforms=platforms or ["aws"],
    )


class ImageWorker(BaseWorker):
    name = "image_agent"
    description = "Builds, promotes and lists golden images"
    supported_tasks = (TaskType.IMAGE_MANAGEMENT,)
    required_tools = (
        "generate_image_contract",
        "generate_packer_template",
        "generate_ansible_playbook",
        "promote_image",
        "list_images",
    )
    system_prompt = (
        "You are an infrastructure image specification expert. Parse requirements into "
        "structured JSON. Output ONLY valid JSON."
    )

    async def execute(self, task: TaskSpec) -> AgentResult:
        run = self.new_run(task)
        operation = determine_operation(task.intent_text)
        run.evidence["operation_type"] = operation
        if operation == "promote":
            return await self._promote(run)
        if operation == "list":
            return await self._list(run)
        return await self._create(run)

    async def _create(self, run: WorkerRun) -> AgentResult:
        task = run.task
        content = await run.complete(
            "\n".join(
                [
                    "You are the FleetAgent Image Worker. Parse the request into image requirements.",
                    "",
                    self.task_block(task),
                    "",
                    REQUIREMENTS_INSTRUCTIONS,
                ]
            ),
            model_alias="extractor",
        )
        outcome = parse_model(content, ImageRequirements)
        if outcome.ok:
            requirements = outcome.value
            method, warning = outcome.method, outcome.warning
        else:
            log.warning("image_requirements_fallback", task_id=task.id, errors=outcome.errors[:5])
            requirements = fallback_requirements(task.intent_text, task.context.platforms)
            method, warning = ParseMethod.LENIENT, WARN_SYNTHESIZED
        run.evidence["requirements"] = requirements.model_dump()

        contract_raw = await run.tool(
            "generate_image_contract",
            {"requirements": requirements.model_dump()},
            evidence_key="image_contract",
        )
        contract_doc = read_result(ImageContract, contract_raw) or ImageContract()
        contract = contract_doc.model_dump()

        templates: dict[str, Any] = {}
        for platform in requirements.platforms:
            template = await run.tool(
                "generate_packer_template",
                {"platform": platform, "contract": contract},
                essential=False,
                evidence_key=f"packer_template:{platform}",
            )
            if template is not None:
                templates[platform] = template

        playbook = await run.tool(
            "generate_ansible_playbook",
            {"contract": contract},
            essential=False,
            placeholder={"status": "generation_failed"},
            evidence_key="ansible_playbook",
        )

        image_name = contract_doc.name or requirements.name or "golden-image"
        plan = run.fallback_plan(0, summary=f"Create golden image: {image_name}")()
        plan = plan.model_copy(
            update={
                "report": {
                    "image_contract": contract,
                    "packer_templates": templates,
                    "ansible_playbook": playbook,
                    "platforms": requirements.platforms,
                }
            }
        )
        return run.build(
            plan=plan,
            summary=f"Generated ImageContract for {image_name} with {len(requirements.platforms)} platform targets",
            parse_method=method,
            parse_warning=warning,
            actions=decision_actions(
                ("Approve & Build", "Approve the image contract and start building"),
                ("Modify Contract", "Edit the image contract before building"),
                ("Reject", "Reject and cancel the image creation"),
            ),
        )

    async def _promote(self, run: WorkerRun) -> AgentResult:
        metadata = run.task.context.metadata
        family = str(metadata.get("image_family", ""))
        version = str(metadata.get("image_version", ""))
        await run.tool(
            "promote_image",
            {"image_family": family, "version": version, "target_environment": run.task.environment},
            evidence_key="promotion_result",
        )
        return run.build(
            plan=None,
            summary=f"Promoted image {family}:{version} to {run.task.environment}",
            status=AgentStatus.COMPLETED,
            actions=READ_ONLY_ACTIONS,
            quality_score=LOOKUP_QUALITY,
        )

    async def _list(self, run: WorkerRun) -> AgentResult:
        family = run.task.context.metadata.get("image_family")
        params = {"family": family, "limit": 20} if family else {"limit": 20}
        await run.tool("list_images", params, evidence_key="images")
        return run.build(
            plan=None,
            summary="Listed available golden images",
            status=AgentStatus.COMPLETED,
            actions=READ_ONLY_ACTIONS,
            quality_score=LOOKUP_QUALITY,
        )
