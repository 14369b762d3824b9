"""Worker 查询路由

GET /api/workers: 已注册 Worker 描述列表（按名称排序）。
"""

from fastapi import APIRouter, Depends
from fleetagent.agents import WorkerRegistry
from fleetagent.core.models import WorkerDescriptor
from pydantic import BaseModel

from ..deps import get_worker_registry

router = APIRouter()


class WorkerListResponse(BaseModel):
    workers: list[WorkerDescriptor]


@router.get("/api/workers", response_model=WorkerListResponse)
async def list_workers(registry: WorkerRegistry = Depends(get_worker_registry)):
    return WorkerListResponse(workers=registry.worker_info())
