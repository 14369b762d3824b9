"""WorkerRegistry 单元测试"""

from unittest.mock import AsyncMock

from fleetagent.agents import BaseWorker, WorkerRegistry, default_workers
from fleetagent.core.models import AgentResult, TaskSpec, TaskType
from fleetagent.tools import ToolRegistry


class _Worker(BaseWorker):
    name = "stub_agent"
    description = "stub"
    supported_tasks = (TaskType.DRIFT_REMEDIATION, TaskType.PATCH_ROLLOUT)

    async def execute(self, task: TaskSpec) -> AgentResult:
        return self.new_run(task).build(plan=None, summary="noop")


class _NarrowWorker(_Worker):
    supported_tasks = (TaskType.PATCH_ROLLOUT,)


class _OtherWorker(_Worker):
    name = "other_agent"
    supported_tasks = (TaskType.DRIFT_REMEDIATION,)


def _make(cls: type[BaseWorker]) -> BaseWorker:
    return cls(AsyncMock(), ToolRegistry())


class TestRegister:
    def test_register_indexes_by_task_type(self):
        registry = WorkerRegistry()
        worker = _make(_Worker)
        registry.register(worker)

        assert registry.get("stub_agent") is worker
        assert registry.get_for_task(TaskType.DRIFT_REMEDIATION) == [worker]
        assert registry.get_for_task(TaskType.PATCH_ROLLOUT) == [worker]
        assert len(registry) == 1

    def test_register_same_name_is_idempotent(self):
        """同名重复注册不产生重复条目"""
        registry = WorkerRegistry()
        registry.register(_make(_Worker))
        second = _make(_Worker)
        registry.register(second)

        assert len(registry) == 1
        assert registry.get_for_task(TaskType.DRIFT_REMEDIATION) == [second]

    def test_reregister_drops_unsupported_task_types(self):
        registry = WorkerRegistry([_make(_Worker)])
        narrow = _make(_NarrowWorker)
        registry.register(narrow)

        assert registry.get_for_task(TaskType.DRIFT_REMEDIATION) == []
        assert registry.get_for_task(TaskType.PATCH_ROLLOUT) == [narrow]

    def test_registration_order_preserved(self):
        first, second = _make(_Worker), _make(_OtherWorker)
        registry = WorkerRegistry([first, second])

        assert registry.get_for_task(TaskType.DRIFT_REMEDIATION) == [first, second]


class TestLookup:
    def test_unknown_task_type_returns_empty(self):
        registry = WorkerRegistry([_make(_Worker)])

        assert registry.get_for_task("not_a_task") == []
        assert registry.get_for_task(TaskType.SECURITY_SCAN) == []

    def test_string_task_type_accepted(self):
        registry = WorkerRegistry([_make(_Worker)])

        assert len(registry.get_for_task("drift_remediation")) == 1

    def test_get_missing_returns_none(self):
        assert WorkerRegistry().get("missing") is None

    def test_worker_info_sorted(self):
        registry = WorkerRegistry([_make(_Worker), _make(_OtherWorker)])

        info = registry.worker_info()

        assert [d.name for d in info] == ["other_agent", "stub_agent"]
        assert info[1].supported_tasks == ["drift_remediation", "patch_rollout"]
        assert registry.list_workers() == ["other_agent", "stub_agent"]


class TestDefaultWorkers:
    def test_every_task_type_has_a_worker(self):
        registry = WorkerRegistry(default_workers(AsyncMock(), ToolRegistry()))

        assert len(registry) == 12
        for task_type in TaskType:
            assert len(registry.get_for_task(task_type)) == 1, task_type

    def test_worker_names_unique(self):
        workers = default_workers(AsyncMock(), ToolRegistry())
        names = [w.name for w in workers]
        assert len(set(names)) == len(names)
