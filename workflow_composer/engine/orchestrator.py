from typing import Any, List, Optional
import time

from sqlalchemy.ext.asyncio import async_sessionmaker

from workflow_composer.core.errors import OrchestrationFailedError, PipelineError
from workflow_composer.core.logging import logger
from workflow_composer.engine.simulation.simulator import DryRunSimulator
from workflow_composer.engine.stages.base import BaseStageExecutor
from workflow_composer.schemas.execution import PipelineRun, PipelineState
from workflow_composer.schemas.workflow import WorkflowStatus
from workflow_composer.services.validation_service import ValidationService
from workflow_composer.services.workflow_service import AutomationService, WorkflowService

RUNNING_STATES = {
    "planner": PipelineState.PLANNER_RUNNING,
    "refiner": PipelineState.REFINER_RUNNING,
    "optimizer": PipelineState.OPTIMIZER_RUNNING,
    "finalizer": PipelineState.FINALIZER_RUNNING,
}

class PipelineOrchestrator:
    """
    Runs planner -> refiner -> optimizer -> finalizer strictly in sequence,
    validates the finalizer's document and persists the outcome.

    Holds no per-run state, so one instance can serve concurrent runs: each
    run gets its own PipelineRun and its own database sessions. Failures are
    reported on the returned run and never retried here.
    """

    def __init__(
        self,
        stages: List[BaseStageExecutor],
        session_factory: async_sessionmaker,
        simulator: Optional[DryRunSimulator] = None,
    ):
        self.stages = stages
        self.session_factory = session_factory
        self.simulator = simulator or DryRunSimulator()

    async def run(
        self,
        prompt: str,
        user_id: str,
        dry_run: bool = False,
        workflow_id: Optional[str] = None,
    ) -> PipelineRun:
        run = PipelineRun(workflow_id=workflow_id, user_id=user_id, prompt=prompt, dry_run=dry_run)
        current_stage = "setup"
        start_time = time.time()

        try:
            if run.workflow_id is None:
                run.workflow_id = await self._create_placeholder(user_id, prompt)
            logger.info(f"Starting orchestration for workflow {run.workflow_id}: {prompt[:100]}")

            # Each stage consumes the previous stage's output
            stage_input: Any = prompt
            for stage in self.stages:
                current_stage = stage.stage_name
                self._transition(run, RUNNING_STATES.get(stage.stage_name, run.state))
                result = await stage.execute(stage_input, run.workflow_id)
                run.stage_results.append(result)
                stage_input = result.output

            # Validate, then persist the outcome
            current_stage = "validation"
            self._transition(run, PipelineState.VALIDATING)
            await self._finish(run, stage_input)

        except PipelineError as e:
            await self._fail(run, e.stage or current_stage, e.message)
        except Exception as e:
            error = OrchestrationFailedError(f"Unexpected error during {current_stage}: {e}", stage=current_stage)
            logger.exception(f"Orchestration error for workflow {run.workflow_id}")
            await self._fail(run, current_stage, error.message)

        duration = int((time.time() - start_time) * 1000)
        logger.info(
            f"Orchestration finished for workflow {run.workflow_id}: {run.status.value}",
            extra={"extra_fields": {
                "workflow_id": run.workflow_id,
                "status": run.status.value,
                "error_stage": run.error_stage,
                "duration_ms": duration,
            }},
        )
        return run

    async def _create_placeholder(self, user_id: str, prompt: str) -> str:
        async with self.session_factory() as db:
            workflow = await WorkflowService.create_placeholder(db, user_id, prompt)
            await db.commit()
            return workflow.id

    async def _finish(self, run: PipelineRun, document: Any):
        run.workflow_document = document if isinstance(document, dict) else {"value": document}
        report = ValidationService.validate(document)
        run.validation = report

        if not report.is_valid:
            logger.warning(
                f"Workflow {run.workflow_id} failed validation with {len(report.errors)} errors",
                extra={"extra_fields": {"errors": report.errors}},
            )
            async with self.session_factory() as db:
                await WorkflowService.mark_validation_failed(db, run.workflow_id, run.workflow_document, report.errors)
                await db.commit()
            self._transition(run, PipelineState.VALIDATION_FAILED)
            run.status = WorkflowStatus.VALIDATION_FAILED
            run.error_stage = "validation"
            run.error_message = "Workflow validation failed"
            return

        if run.dry_run:
            run.dry_run_result = self.simulator.simulate(document, workflow_id=run.workflow_id)

        async with self.session_factory() as db:
            workflow = await WorkflowService.mark_completed(db, run.workflow_id, document, dry_run=run.dry_run)
            if workflow is None:
                raise OrchestrationFailedError(f"Workflow {run.workflow_id} disappeared", stage="validation")
            automation = await AutomationService.create(db, workflow)
            await db.commit()
            run.automation_id = automation.id

        self._transition(run, PipelineState.COMPLETED)
        run.status = WorkflowStatus.DRY_RUN_COMPLETE if run.dry_run else WorkflowStatus.COMPLETED

    async def _fail(self, run: PipelineRun, stage: str, message: str):
        self._transition(run, PipelineState.FAILED)
        run.status = WorkflowStatus.FAILED
        run.error_stage = stage
        run.error_message = message
        if run.workflow_id is None:
            return
        try:
            async with self.session_factory() as db:
                await WorkflowService.mark_failed(db, run.workflow_id, stage, message)
                await db.commit()
        except Exception as e:
            # The caller still gets the failure even if it cannot be stored
            logger.error(f"Could not record failure for workflow {run.workflow_id}: {e}")

    @staticmethod
    def _transition(run: PipelineRun, state: PipelineState):
        logger.debug(f"Workflow {run.workflow_id}: {run.state.value} -> {state.value}")
        run.state = state

def build_orchestrator(session_factory: Optional[async_sessionmaker] = None) -> PipelineOrchestrator:
    """Wire the pipeline from settings: stage providers, template store, trace and credential alerts."""
    from workflow_composer.config import settings
    from workflow_composer.database import get_session_factory
    from workflow_composer.engine.stages import build_stage_executors
    from workflow_composer.integrations.credential_notifier import CredentialNotifier
    from workflow_composer.integrations.prompt_store import PromptTemplateLoader
    from workflow_composer.services.execution_trace_service import TraceRecorder

    session_factory = session_factory or get_session_factory()
    stages = build_stage_executors(
        settings,
        prompt_loader=PromptTemplateLoader(),
        trace_recorder=TraceRecorder(session_factory),
        notifier=CredentialNotifier(),
    )
    return PipelineOrchestrator(stages, session_factory)
