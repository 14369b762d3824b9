"""SOP Worker -- 标准作业程序编写

generate_sop 为必要工具；校验与演练失败时降级。
LLM 基于 SOP 文档与校验结果给出注册计划。
"""

from fleetagent.core.models import AgentResult, TaskSpec, TaskType
from fleetagent.tools.results import SOPDocument, read_result

from ..base import PLAN_JSON_INSTRUCTIONS, BaseWorker, decision_actions, render_context


class SOPWorker(BaseWorker):
    name = "sop_agent"
    description = "Authors, validates and simulates standard operating procedures"
    supported_tasks = (TaskType.SOP_AUTHORING,)
    required_tools = ("generate_sop", "validate_sop", "simulate_sop")

    async def execute(self, task: TaskSpec) -> AgentResult:
        run = self.new_run(task)

        requirements = {
            "goal": task.goal,
            "intent": task.user_intent,
            "environment": task.environment,
            "platforms": task.context.platforms,
        }
        sop_raw = await run.tool("generate_sop", {"requirements": requirements}, evidence_key="sop")
        document = read_result(SOPDocument, sop_raw) or SOPDocument()
        sop = document.model_dump()
        sop_name = document.name or "unnamed-sop"

        validation = await run.tool(
            "validate_sop",
            {"sop": sop},
            essential=False,
            placeholder={"status": "validation_skipped"},
            evidence_key="validation",
        )
        simulation = await run.tool(
            "simulate_sop",
            {"sop": sop},
            essential=False,
            placeholder={"status": "simulation_skipped"},
            evidence_key="simulation",
        )

        prompt = "\n".join(
            [
                "You are the FleetAgent SOP Worker. Produce the plan to validate, dry-run and",
                "register the SOP below.",
                "",
                self.task_block(task),
                "",
                "## SOP",
                render_context(sop),
                "",
                "## Validation",
                render_context(validation),
                "",
                "## Simulation",
                render_context(simulation),
                "",
                PLAN_JSON_INSTRUCTIONS,
            ]
        )
        content = await run.complete(prompt)
        resolution = run.resolve_plan(content, run.fallback_plan(0, summary=f"Register SOP {sop_name}"))

        return run.build_from_resolution(
            resolution,
            summary=f"Generated SOP '{sop_name}' with {len(document.steps)} steps",
            actions=decision_actions(
                ("Approve & Register", "Approve the SOP and register it"),
                ("Modify SOP", "Edit the SOP before registering"),
                ("Reject", "Reject and discard the SOP"),
            ),
        )
