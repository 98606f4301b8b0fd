import copy
import json
import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from workflow_composer.api.orchestrations import get_orchestrator
from workflow_composer.api.workflows import get_n8n_client
from workflow_composer.core.errors import ProviderError
from workflow_composer.database import get_db
from workflow_composer.engine.orchestrator import PipelineOrchestrator
from workflow_composer.integrations.n8n_client import N8nClient
from workflow_composer.main import app
from workflow_composer.services.workflow_service import WorkflowService
import workflow_composer.worker.tasks as worker_tasks
from tests.helpers import FakeLLMClient, build_stages

API = "/api/v1"

def clients_for(document, **overrides):
    clients = {
        "planner": FakeLLMClient(json.dumps({"objective": "Reply to tickets", "steps": []})),
        "refiner": FakeLLMClient(json.dumps({"objective": "Reply to tickets", "error_handling": {}})),
        "optimizer": FakeLLMClient(json.dumps({"objective": "Reply to tickets", "performance_optimizations": []})),
        "finalizer": FakeLLMClient(json.dumps(document)),
    }
    clients.update(overrides)
    return clients

@pytest.fixture
def use_clients(session_factory):
    def install(clients):
        orchestrator = PipelineOrchestrator(build_stages(clients, session_factory=session_factory), session_factory)
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    return install

@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session
            await session.commit()

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}

@pytest.mark.asyncio
async def test_root(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert "Workflow Composer API" in response.json()["message"]

@pytest.mark.asyncio
async def test_orchestration_success(client, use_clients, valid_document):
    use_clients(clients_for(valid_document))

    response = await client.post(f"{API}/orchestrations", json={"prompt": "auto-reply to support", "user_id": "u1"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "completed"
    assert body["workflow_document"]["name"] == valid_document["name"]
    assert body["validation"]["is_valid"] is True
    assert [s["stage_name"] for s in body["stage_results"]] == ["planner", "refiner", "optimizer", "finalizer"]

    workflow_id = body["workflow_id"]
    response = await client.get(f"{API}/workflows/{workflow_id}")
    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert response.json()["is_deployable"] is True

    response = await client.get(f"{API}/workflows", params={"user_id": "u1"})
    assert [w["id"] for w in response.json()] == [workflow_id]

    response = await client.get(f"{API}/workflows/{workflow_id}/stages")
    assert response.status_code == 200
    assert len(response.json()) == 8

    response = await client.get(f"{API}/automations", params={"user_id": "u1"})
    assert response.status_code == 200
    assert response.json()[0]["id"] == body["automation_id"]

    response = await client.get(f"{API}/automations/{body['automation_id']}")
    assert response.status_code == 200
    assert response.json()["workflow_id"] == workflow_id

@pytest.mark.asyncio
async def test_orchestration_stage_failure_is_bad_gateway(client, use_clients, valid_document):
    use_clients(clients_for(valid_document, refiner=FakeLLMClient(ProviderError("anthropic", "down", status_code=500))))

    response = await client.post(f"{API}/orchestrations", json={"prompt": "auto-reply to support"})

    assert response.status_code == 502
    body = response.json()
    assert body["success"] is False
    assert body["error_stage"] == "refiner"

@pytest.mark.asyncio
async def test_orchestration_validation_failure_is_bad_request(client, use_clients, valid_document):
    document = copy.deepcopy(valid_document)
    document["nodes"] = []
    use_clients(clients_for(document))

    response = await client.post(f"{API}/orchestrations", json={"prompt": "auto-reply to support"})

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "validation_failed"
    assert any("at least one node" in e for e in body["validation_errors"])

@pytest.mark.asyncio
async def test_orchestration_rejects_empty_prompt(client):
    response = await client.post(f"{API}/orchestrations", json={"prompt": ""})
    assert response.status_code == 422

@pytest.mark.asyncio
async def test_orchestration_dry_run(client, use_clients, valid_document):
    use_clients(clients_for(valid_document))

    response = await client.post(f"{API}/orchestrations", json={"prompt": "auto-reply", "dry_run": True})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "dry_run_complete"
    assert body["dry_run"]["ready_for_deployment"] is True

@pytest.mark.asyncio
async def test_async_orchestration_enqueues_task(client, session_factory, monkeypatch):
    queued = []

    class FakeTask:
        def delay(self, *args):
            queued.append(args)
            return type("AsyncResult", (), {"id": "task-1"})()

    monkeypatch.setattr(worker_tasks, "run_orchestration_task", FakeTask())

    response = await client.post(f"{API}/orchestrations/async", json={"prompt": "auto-reply", "user_id": "u2"})

    assert response.status_code == 202
    body = response.json()
    assert body["task_id"] == "task-1"
    assert body["status"] == "processing"
    assert queued == [(body["workflow_id"], "auto-reply", "u2", False)]

    async with session_factory() as db:
        workflow = await WorkflowService.get_by_id(db, body["workflow_id"])
        assert workflow.status == "processing"

@pytest.mark.asyncio
async def test_get_unknown_workflow(client):
    response = await client.get(f"{API}/workflows/does-not-exist")
    assert response.status_code == 404

@pytest.mark.asyncio
async def test_validate_endpoint(client, valid_document):
    response = await client.post(f"{API}/workflows/validate", json=valid_document)
    assert response.status_code == 200
    assert response.json()["is_valid"] is True

    response = await client.post(f"{API}/workflows/validate", json={"name": "x", "nodes": [], "connections": {}})
    assert response.json()["is_valid"] is False

@pytest.mark.asyncio
async def test_dry_run_endpoint(client, valid_document):
    response = await client.post(f"{API}/workflows/dry-run", json=valid_document)
    assert response.status_code == 200
    body = response.json()
    assert body["total_nodes"] == 2
    assert body["ready_for_deployment"] is True

@pytest.mark.asyncio
async def test_download_and_deploy(client, use_clients, valid_document):
    use_clients(clients_for(valid_document))
    workflow_id = (await client.post(f"{API}/orchestrations", json={"prompt": "auto-reply"})).json()["workflow_id"]

    response = await client.get(f"{API}/workflows/{workflow_id}/download")
    assert response.status_code == 200
    assert "attachment" in response.headers["content-disposition"]
    assert response.json()["name"] == valid_document["name"]

    def n8n_handler(request: httpx.Request):
        return httpx.Response(200, json={"id": "n8n-42"})

    n8n_http = httpx.AsyncClient(transport=httpx.MockTransport(n8n_handler))
    app.dependency_overrides[get_n8n_client] = lambda: N8nClient(
        base_url="https://n8n.test", api_token="token", http_client=n8n_http
    )
    response = await client.post(f"{API}/workflows/{workflow_id}/deploy")
    await n8n_http.aclose()

    assert response.status_code == 200
    assert response.json() == {"workflow_id": workflow_id, "n8n_workflow_id": "n8n-42", "name": valid_document["name"]}

@pytest.mark.asyncio
async def test_download_non_ascii_name(client, use_clients, valid_document):
    document = copy.deepcopy(valid_document)
    document["name"] = "Support → Reply 🚀"
    use_clients(clients_for(document))
    workflow_id = (await client.post(f"{API}/orchestrations", json={"prompt": "auto-reply"})).json()["workflow_id"]

    response = await client.get(f"{API}/workflows/{workflow_id}/download")

    assert response.status_code == 200
    disposition = response.headers["content-disposition"]
    assert 'filename="Support_Reply.json"' in disposition
    assert "filename*=UTF-8''Support%20%E2%86%92%20Reply%20%F0%9F%9A%80.json" in disposition
    assert response.json()["name"] == document["name"]

@pytest.mark.asyncio
async def test_download_non_string_name(client, use_clients, valid_document):
    document = copy.deepcopy(valid_document)
    document["name"] = 42
    use_clients(clients_for(document))
    body = (await client.post(f"{API}/orchestrations", json={"prompt": "auto-reply"})).json()
    assert body["status"] == "validation_failed"

    response = await client.get(f"{API}/workflows/{body['workflow_id']}/download")

    assert response.status_code == 200
    assert 'filename="42.json"' in response.headers["content-disposition"]

@pytest.mark.asyncio
async def test_deploy_rejects_non_deployable_workflow(client, session_factory):
    async with session_factory() as db:
        workflow = await WorkflowService.create_placeholder(db, "u3", "something")
        await db.commit()

    response = await client.post(f"{API}/workflows/{workflow.id}/deploy")
    assert response.status_code == 409
