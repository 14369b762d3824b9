"""Specialist Workers -- 每种任务类型一个 Worker"""

from fleetagent.provider import CompletionService
from fleetagent.tools import ToolRegistry

from ..base import BaseWorker
from .certificate import CertificateWorker
from .compliance import ComplianceWorker
from .cost import CostWorker
from .dr import DRWorker
from .drift import DriftWorker
from .image import ImageWorker
from .incident import IncidentWorker
from .patch import PatchWorker
from .security import SecurityWorker
from .sop import SOPWorker
from .terraform import TerraformWorker
from .vulnerability import VulnerabilityWorker

WORKER_CLASSES: tuple[type[BaseWorker], ...] = (
    DriftWorker,
    PatchWorker,
    ComplianceWorker,
    IncidentWorker,
    DRWorker,
    CostWorker,
    SecurityWorker,
    ImageWorker,
    SOPWorker,
    TerraformWorker,
    CertificateWorker,
    VulnerabilityWorker,
)


def default_workers(completion: CompletionService, tools: ToolRegistry) -> list[BaseWorker]:
    """实例化全部内置 Worker"""
    return [cls(completion, tools) for cls in WORKER_CLASSES]


__all__ = [
    "WORKER_CLASSES",
    "default_workers",
    "CertificateWorker",
    "ComplianceWorker",
    "CostWorker",
    "DRWorker",
    "DriftWorker",
    "ImageWorker",
    "IncidentWorker",
    "PatchWorker",
    "SecurityWorker",
    "SOPWorker",
    "TerraformWorker",
    "VulnerabilityWorker",
]
