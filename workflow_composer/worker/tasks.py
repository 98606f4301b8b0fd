import asyncio
from typing import Any, Dict

from workflow_composer.core.logging import logger
from workflow_composer.engine.orchestrator import build_orchestrator
from workflow_composer.worker.celery import celery_app

@celery_app.task(name="run_orchestration_task", acks_late=True)
def run_orchestration_task(workflow_id: str, prompt: str, user_id: str, dry_run: bool = False) -> Dict[str, Any]:
    # No retries: the orchestrator has already recorded the failure on the workflow
    logger.info(f"Running queued orchestration for workflow {workflow_id}")
    return asyncio.run(async_run_orchestration(workflow_id, prompt, user_id, dry_run))

async def async_run_orchestration(workflow_id: str, prompt: str, user_id: str, dry_run: bool) -> Dict[str, Any]:
    orchestrator = build_orchestrator()
    run = await orchestrator.run(prompt, user_id, dry_run=dry_run, workflow_id=workflow_id)
    return run.to_response()
