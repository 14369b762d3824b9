"""GET /api/workers 测试"""

from httpx import AsyncClient


async def test_list_workers_sorted(client: AsyncClient):
    resp = await client.get("/api/workers")

    assert resp.status_code == 200
    workers = resp.json()["workers"]
    names = [w["name"] for w in workers]
    assert len(names) == 12
    assert names == sorted(names)
    drift = next(w for w in workers if w["name"] == "drift_agent")
    assert drift["supported_tasks"] == ["drift_remediation"]
    assert "query_assets" in drift["required_tools"]
