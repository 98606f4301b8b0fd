from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from enum import Enum
import uuid

from workflow_composer.schemas.workflow import ValidationReport, WorkflowStatus

class StageStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

class StageOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    DEGRADED = "degraded"
    FAILED = "failed"

class StageResult(BaseModel):
    """
    Snapshot of one pipeline stage. A running snapshot is written when the
    stage starts and a single terminal copy of it when the stage ends.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    workflow_id: str
    stage_number: int = Field(ge=1, le=4)
    stage_name: str
    input: Any = None
    output: Any = None
    status: StageStatus = StageStatus.RUNNING
    outcome: Optional[StageOutcome] = None
    note: Optional[str] = None
    error_message: Optional[str] = None
    execution_time_ms: Optional[int] = None
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != StageStatus.RUNNING

    def complete(self, output: Any, execution_time_ms: int, note: Optional[str] = None) -> "StageResult":
        if self.is_terminal:
            raise ValueError(f"Stage result {self.id} is already {self.status.value}")
        return self.model_copy(update={
            "status": StageStatus.COMPLETED,
            "outcome": StageOutcome.DEGRADED if note else StageOutcome.SUCCEEDED,
            "output": output,
            "note": note,
            "execution_time_ms": execution_time_ms,
            "finished_at": datetime.now(timezone.utc),
        })

    def fail(self, error_message: str, execution_time_ms: int) -> "StageResult":
        if self.is_terminal:
            raise ValueError(f"Stage result {self.id} is already {self.status.value}")
        return self.model_copy(update={
            "status": StageStatus.FAILED,
            "outcome": StageOutcome.FAILED,
            "output": None,
            "error_message": error_message,
            "execution_time_ms": execution_time_ms,
            "finished_at": datetime.now(timezone.utc),
        })

class StageExecutionInDB(BaseModel):
    id: str
    stage_result_id: str
    workflow_id: str
    stage_number: int
    stage_name: str
    status: StageStatus
    outcome: Optional[StageOutcome] = None
    input_data: Any = None
    output_data: Any = None
    error_message: Optional[str] = None
    execution_time_ms: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True

class NodeExecutionRecord(BaseModel):
    node_id: Optional[str] = None
    node_name: Optional[str] = None
    node_type: Optional[str] = None
    execution_order: int
    success: bool
    output: Dict[str, Any] = {}
    errors: List[str] = []
    warnings: List[str] = []
    execution_time_ms: int

class DryRunResult(BaseModel):
    execution_id: str
    workflow_id: Optional[str] = None
    workflow_name: Optional[str] = None
    node_executions: List[NodeExecutionRecord] = []
    total_nodes: int = 0
    successful_nodes: int = 0
    failed_nodes: int = 0
    success_rate: float = 0.0
    errors: List[str] = []
    warnings: List[str] = []
    validation: Optional[ValidationReport] = None
    recommendations: List[str] = []
    ready_for_deployment: bool = False
    started_at: datetime
    finished_at: Optional[datetime] = None
    total_execution_time_ms: int = 0

class PipelineState(str, Enum):
    CREATED = "created"
    PLANNER_RUNNING = "planner_running"
    REFINER_RUNNING = "refiner_running"
    OPTIMIZER_RUNNING = "optimizer_running"
    FINALIZER_RUNNING = "finalizer_running"
    VALIDATING = "validating"
    COMPLETED = "completed"
    VALIDATION_FAILED = "validation_failed"
    FAILED = "failed"

class PipelineRun(BaseModel):
    workflow_id: Optional[str] = None
    user_id: str
    prompt: str
    dry_run: bool = False
    state: PipelineState = PipelineState.CREATED
    status: WorkflowStatus = WorkflowStatus.PROCESSING
    stage_results: List[StageResult] = []
    workflow_document: Optional[Dict[str, Any]] = None
    validation: Optional[ValidationReport] = None
    dry_run_result: Optional[DryRunResult] = None
    automation_id: Optional[str] = None
    error_stage: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status in (WorkflowStatus.COMPLETED, WorkflowStatus.DRY_RUN_COMPLETE)

    def to_response(self) -> Dict[str, Any]:
        if self.succeeded:
            return {
                "success": True,
                "workflow_id": self.workflow_id,
                "status": self.status.value,
                "workflow_document": self.workflow_document,
                "stage_results": [r.model_dump(mode="json") for r in self.stage_results],
                "validation": self.validation.model_dump(mode="json") if self.validation else None,
                "dry_run": self.dry_run_result.model_dump(mode="json") if self.dry_run_result else None,
                "automation_id": self.automation_id,
            }
        response: Dict[str, Any] = {
            "success": False,
            "workflow_id": self.workflow_id,
            "status": self.status.value,
            "error_stage": self.error_stage,
            "error_message": self.error_message,
        }
        if self.validation is not None and not self.validation.is_valid:
            response["validation_errors"] = self.validation.errors
        return response
