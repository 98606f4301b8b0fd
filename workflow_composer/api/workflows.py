from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, List
from urllib.parse import quote
import re

from workflow_composer.core.errors import CredentialMissingError, ProviderError
from workflow_composer.database import get_db
from workflow_composer.engine.simulation.simulator import DryRunSimulator
from workflow_composer.integrations.n8n_client import N8nClient
from workflow_composer.schemas.execution import DryRunResult, StageExecutionInDB
from workflow_composer.schemas.workflow import DeployResult, ValidationReport, WorkflowInDB
from workflow_composer.services.execution_trace_service import ExecutionTraceService
from workflow_composer.services.validation_service import ValidationService
from workflow_composer.services.workflow_service import WorkflowService

router = APIRouter()

def content_disposition(name: Any) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 filename."""
    name = str(name)
    fallback = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("_") or "workflow"
    return f"attachment; filename=\"{fallback}.json\"; filename*=UTF-8''{quote(name + '.json', safe='')}"


def get_n8n_client() -> N8nClient:
    return N8nClient()

@router.get("", response_model=List[WorkflowInDB])
async def get_workflows(
    user_id: str,
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db)
):
    return await WorkflowService.get_for_user(db, user_id, skip=skip, limit=limit)

@router.post("/validate", response_model=ValidationReport)
async def validate_document(document: Dict[str, Any]):
    return ValidationService.validate(document)

@router.post("/dry-run", response_model=DryRunResult)
async def dry_run_document(document: Dict[str, Any]):
    return DryRunSimulator().simulate(document)

@router.get("/{workflow_id}", response_model=WorkflowInDB)
async def get_workflow(
    workflow_id: str,
    db: AsyncSession = Depends(get_db)
):
    workflow = await WorkflowService.get_by_id(db, workflow_id)
    if not workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return workflow

@router.get("/{workflow_id}/stages", response_model=List[StageExecutionInDB])
async def get_workflow_stages(
    workflow_id: str,
    db: AsyncSession = Depends(get_db)
):
    workflow = await WorkflowService.get_by_id(db, workflow_id)
    if not workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return await ExecutionTraceService.get_for_workflow(db, workflow_id)

@router.get("/{workflow_id}/download")
async def download_workflow(
    workflow_id: str,
    db: AsyncSession = Depends(get_db)
):
    workflow = await WorkflowService.get_by_id(db, workflow_id)
    if not workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    if not workflow.workflow_json:
        raise HTTPException(status_code=409, detail="Workflow has no document yet")

    return JSONResponse(
        content=workflow.workflow_json,
        headers={"Content-Disposition": content_disposition(workflow.workflow_json.get("name") or workflow.id)},
    )

@router.post("/{workflow_id}/deploy", response_model=DeployResult)
async def deploy_workflow(
    workflow_id: str,
    db: AsyncSession = Depends(get_db),
    n8n: N8nClient = Depends(get_n8n_client),
):
    workflow = await WorkflowService.get_by_id(db, workflow_id)
    if not workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    if not workflow.is_deployable:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Workflow is not deployable")

    try:
        created = await n8n.create_workflow(workflow.workflow_json)
    except CredentialMissingError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    except ProviderError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    return DeployResult(workflow_id=workflow.id, n8n_workflow_id=created["id"], name=created["name"])
