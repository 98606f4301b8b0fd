from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import select
from typing import List
import uuid

from workflow_composer.models.execution import StageExecution
from workflow_composer.schemas.execution import StageResult

class ExecutionTraceService:
    @staticmethod
    async def append(db: AsyncSession, result: StageResult) -> StageExecution:
        snapshot = result.model_dump(mode="json")
        row = StageExecution(
            id=str(uuid.uuid4()),
            stage_result_id=result.id,
            workflow_id=result.workflow_id,
            stage_number=result.stage_number,
            stage_name=result.stage_name,
            status=result.status.value,
            outcome=result.outcome.value if result.outcome else None,
            input_data=snapshot["input"],
            output_data=snapshot["output"],
            error_message=result.error_message,
            execution_time_ms=result.execution_time_ms,
            created_at=result.finished_at or result.started_at,
        )
        db.add(row)
        await db.flush()
        return row

    @staticmethod
    async def get_for_workflow(db: AsyncSession, workflow_id: str) -> List[StageExecution]:
        query = (
            select(StageExecution)
            .where(StageExecution.workflow_id == workflow_id)
            .order_by(StageExecution.stage_number, StageExecution.created_at)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

class TraceRecorder:
    """Writes stage snapshots in their own short-lived session."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def record(self, result: StageResult) -> None:
        async with self.session_factory() as db:
            await ExecutionTraceService.append(db, result)
            await db.commit()
