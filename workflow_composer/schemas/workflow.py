from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any
from datetime import datetime
from enum import Enum

class WorkflowStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    DRY_RUN_COMPLETE = "dry_run_complete"
    VALIDATION_FAILED = "validation_failed"
    FAILED = "failed"

class WorkflowNode(BaseModel):
    """A single n8n node as it appears in the exported workflow JSON."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    type: str
    typeVersion: Optional[float] = 1
    position: List[float] = Field(default_factory=lambda: [0, 0])
    parameters: Dict[str, Any] = Field(default_factory=dict)
    credentials: Optional[Dict[str, Any]] = None

class WorkflowDocument(BaseModel):
    """Importable n8n workflow. Connections are keyed by source node."""

    model_config = ConfigDict(extra="allow")

    name: str
    nodes: List[WorkflowNode] = []
    connections: Dict[str, Any] = Field(default_factory=dict)
    active: bool = False
    settings: Dict[str, Any] = Field(default_factory=lambda: {"executionOrder": "v1"})

class ValidationReport(BaseModel):
    is_valid: bool
    errors: List[str] = []
    warnings: List[str] = []
    node_count: int = 0
    connection_count: int = 0
    has_trigger: bool = False
    has_error_handling: bool = False
    has_logging: bool = False
    timestamp: datetime

class OrchestrationRequest(BaseModel):
    prompt: str = Field(min_length=1)
    user_id: Optional[str] = None
    dry_run: bool = False

class WorkflowInDB(BaseModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    workflow_json: Dict[str, Any]
    status: WorkflowStatus
    validation_errors: Optional[List[str]] = None
    error_stage: Optional[str] = None
    error_message: Optional[str] = None
    is_deployable: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class AutomationInDB(BaseModel):
    id: str
    user_id: str
    workflow_id: Optional[str] = None
    prompt: str
    title: Optional[str] = None
    workflow_json: Dict[str, Any]
    status: str
    created_at: datetime

    class Config:
        from_attributes = True

class DeployResult(BaseModel):
    workflow_id: str
    n8n_workflow_id: str
    name: str
