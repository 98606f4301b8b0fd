from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from workflow_composer.models.workflow import Workflow, Automation
from workflow_composer.schemas.workflow import WorkflowStatus
from typing import Any, Dict, List, Optional
import uuid

def _title_for_prompt(prompt: str) -> str:
    summary = prompt.strip().replace("\n", " ")
    if len(summary) > 50:
        summary = f"{summary[:50]}..."
    return f"Automation: {summary}"

class WorkflowService:
    @staticmethod
    async def get_by_id(db: AsyncSession, workflow_id: str) -> Optional[Workflow]:
        query = select(Workflow).where(Workflow.id == workflow_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_for_user(db: AsyncSession, user_id: str, skip: int = 0, limit: int = 100) -> List[Workflow]:
        query = (
            select(Workflow)
            .where(Workflow.user_id == user_id)
            .order_by(desc(Workflow.updated_at))
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def create_placeholder(db: AsyncSession, user_id: str, prompt: str) -> Workflow:
        db_workflow = Workflow(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=_title_for_prompt(prompt),
            description=prompt,
            workflow_json={},
            status=WorkflowStatus.PROCESSING.value,
            is_deployable=False,
        )
        db.add(db_workflow)
        await db.flush()
        return db_workflow

    @staticmethod
    async def mark_failed(db: AsyncSession, workflow_id: str, stage: Optional[str], message: str) -> Optional[Workflow]:
        workflow = await WorkflowService.get_by_id(db, workflow_id)
        if not workflow:
            return None
        workflow.status = WorkflowStatus.FAILED.value
        workflow.error_stage = stage
        workflow.error_message = message
        workflow.is_deployable = False
        await db.flush()
        return workflow

    @staticmethod
    async def mark_validation_failed(
        db: AsyncSession, workflow_id: str, workflow_json: Dict[str, Any], errors: List[str]
    ) -> Optional[Workflow]:
        workflow = await WorkflowService.get_by_id(db, workflow_id)
        if not workflow:
            return None
        # The rejected document is kept for inspection but never deployable
        workflow.workflow_json = workflow_json
        workflow.status = WorkflowStatus.VALIDATION_FAILED.value
        workflow.validation_errors = errors
        workflow.error_stage = "validation"
        workflow.error_message = "Workflow validation failed"
        workflow.is_deployable = False
        await db.flush()
        return workflow

    @staticmethod
    async def mark_completed(
        db: AsyncSession, workflow_id: str, workflow_json: Dict[str, Any], dry_run: bool = False
    ) -> Optional[Workflow]:
        workflow = await WorkflowService.get_by_id(db, workflow_id)
        if not workflow:
            return None
        workflow.workflow_json = workflow_json
        workflow.status = (WorkflowStatus.DRY_RUN_COMPLETE if dry_run else WorkflowStatus.COMPLETED).value
        workflow.validation_errors = None
        workflow.error_stage = None
        workflow.error_message = None
        workflow.is_deployable = True
        await db.flush()
        return workflow

class AutomationService:
    @staticmethod
    async def create(db: AsyncSession, workflow: Workflow) -> Automation:
        automation = Automation(
            id=str(uuid.uuid4()),
            user_id=workflow.user_id,
            workflow_id=workflow.id,
            prompt=workflow.description or "",
            title=workflow.workflow_json.get("name") or workflow.title,
            workflow_json=workflow.workflow_json,
            status="completed",
        )
        db.add(automation)
        await db.flush()
        return automation

    @staticmethod
    async def get_by_id(db: AsyncSession, automation_id: str) -> Optional[Automation]:
        result = await db.execute(select(Automation).where(Automation.id == automation_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_for_user(db: AsyncSession, user_id: str, skip: int = 0, limit: int = 100) -> List[Automation]:
        query = (
            select(Automation)
            .where(Automation.user_id == user_id)
            .order_by(desc(Automation.created_at))
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(query)
        return list(result.scalars().all())
