from typing import Any, List, Optional
from datetime import datetime, timezone
import random
import uuid

from workflow_composer.engine.simulation.registry import get_simulator_class
import workflow_composer.engine.simulation.nodes  # Import to trigger registration
from workflow_composer.core.logging import logger
from workflow_composer.schemas.execution import DryRunResult, NodeExecutionRecord
from workflow_composer.schemas.node import classify_node_type, is_trigger_type
from workflow_composer.schemas.workflow import WorkflowDocument
from workflow_composer.services.validation_service import ValidationService

class DryRunSimulator:
    """
    Structural dry run of a workflow document. Nodes are visited in their
    declared order, not by following connections, and nothing outside the
    process is touched.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def simulate(self, document: Any, workflow_id: Optional[str] = None) -> DryRunResult:
        if isinstance(document, WorkflowDocument):
            document = document.model_dump()

        started_at = datetime.now(timezone.utc)
        execution_id = f"dry_run_{uuid.uuid4().hex[:12]}"
        logger.info(f"Starting dry run {execution_id} for workflow {workflow_id or 'unknown'}")

        validation = ValidationService.validate(document)
        workflow_name = document.get("name") if isinstance(document, dict) else None
        nodes = document.get("nodes") if isinstance(document, dict) else None
        nodes = nodes if isinstance(nodes, list) else []

        result = DryRunResult(
            execution_id=execution_id,
            workflow_id=workflow_id,
            workflow_name=workflow_name,
            total_nodes=len(nodes),
            validation=validation,
            started_at=started_at,
        )

        if not validation.is_valid:
            return self._finish(result, errors=[f"Validation: {e}" for e in validation.errors])

        if not any(is_trigger_type(n.get("type")) for n in nodes):
            return self._finish(result, errors=["No trigger nodes found - workflow has no entry point"])

        records: List[NodeExecutionRecord] = []
        errors: List[str] = []
        warnings: List[str] = []

        for index, node in enumerate(nodes):
            simulator_cls = get_simulator_class(classify_node_type(node.get("type")))
            simulation = simulator_cls(node, rng=self.rng).run()

            records.append(NodeExecutionRecord(
                node_id=node.get("id"),
                node_name=node.get("name"),
                node_type=node.get("type"),
                execution_order=index + 1,
                success=simulation.success,
                output=simulation.output,
                errors=simulation.errors,
                warnings=simulation.warnings,
                execution_time_ms=self.rng.randint(50, 549),
            ))
            errors.extend(f"{node.get('name')}: {e}" for e in simulation.errors)
            warnings.extend(f"{node.get('name')}: {w}" for w in simulation.warnings)

        successful = sum(1 for r in records if r.success)
        result = result.model_copy(update={
            "node_executions": records,
            "successful_nodes": successful,
            "failed_nodes": len(records) - successful,
            "success_rate": (successful / len(records)) * 100 if records else 0.0,
            "warnings": warnings,
            "total_execution_time_ms": sum(r.execution_time_ms for r in records),
        })
        return self._finish(result, errors=errors)

    def _finish(self, result: DryRunResult, errors: List[str]) -> DryRunResult:
        ready = result.success_rate == 100 and not errors
        result = result.model_copy(update={
            "errors": errors,
            "ready_for_deployment": ready,
            "recommendations": self.recommendations(result),
            "finished_at": datetime.now(timezone.utc),
        })
        logger.info(
            f"Dry run {result.execution_id} completed: {'READY' if ready else 'NEEDS_ATTENTION'}",
            extra={"extra_fields": {
                "successful_nodes": result.successful_nodes,
                "failed_nodes": result.failed_nodes,
                "success_rate": result.success_rate,
            }},
        )
        return result

    @staticmethod
    def recommendations(result: DryRunResult) -> List[str]:
        recommendations = []
        if result.validation is not None and not result.validation.is_valid:
            recommendations.append("Fix validation errors before running a dry run")
        if result.failed_nodes > 0:
            recommendations.append("Fix failing nodes before deployment")
        if result.warnings:
            recommendations.append("Review and address warnings for better reliability")
        if result.success_rate < 100:
            recommendations.append("Ensure all node configurations are complete")
        if any("credential" in w for w in result.warnings):
            recommendations.append("Configure all required credentials before deployment")
        return recommendations

def simulate(document: Any, workflow_id: Optional[str] = None) -> DryRunResult:
    return DryRunSimulator().simulate(document, workflow_id=workflow_id)
