from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from workflow_composer.config import settings
from workflow_composer.database import get_db
from workflow_composer.engine.orchestrator import PipelineOrchestrator, build_orchestrator
from workflow_composer.schemas.workflow import OrchestrationRequest, WorkflowStatus
from workflow_composer.services.workflow_service import WorkflowService

router = APIRouter()

def get_orchestrator() -> PipelineOrchestrator:
    return build_orchestrator()

def status_code_for(run_status: WorkflowStatus) -> int:
    if run_status == WorkflowStatus.VALIDATION_FAILED:
        return status.HTTP_400_BAD_REQUEST
    if run_status == WorkflowStatus.FAILED:
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_200_OK

@router.post("")
async def create_orchestration(
    request: OrchestrationRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    run = await orchestrator.run(
        request.prompt,
        request.user_id or settings.DEFAULT_USER_ID,
        dry_run=request.dry_run,
    )
    return JSONResponse(status_code=status_code_for(run.status), content=run.to_response())

@router.post("/async", status_code=status.HTTP_202_ACCEPTED)
async def create_orchestration_async(
    request: OrchestrationRequest,
    db: AsyncSession = Depends(get_db),
):
    # Imported here so the API does not need a broker connection at import time
    from workflow_composer.worker.tasks import run_orchestration_task

    user_id = request.user_id or settings.DEFAULT_USER_ID
    workflow = await WorkflowService.create_placeholder(db, user_id, request.prompt)
    await db.commit()

    task = run_orchestration_task.delay(workflow.id, request.prompt, user_id, request.dry_run)
    return {"workflow_id": workflow.id, "task_id": task.id, "status": WorkflowStatus.PROCESSING.value}
