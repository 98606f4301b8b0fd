from sqlalchemy import String, JSON, Integer, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from datetime import datetime
from typing import Any, Optional
from workflow_composer.database import Base
import uuid

class StageExecution(Base):
    """
    Append-only execution trace. Each row is one StageResult snapshot; the
    running and terminal snapshots of a stage share stage_result_id.
    """
    __tablename__ = "stage_executions"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    stage_result_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    workflow_id: Mapped[str] = mapped_column(String, ForeignKey("workflows.id"), index=True)
    stage_number: Mapped[int] = mapped_column(Integer, nullable=False)
    stage_name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, default="running")
    outcome: Mapped[Optional[str]] = mapped_column(String)
    input_data: Mapped[Optional[Any]] = mapped_column(JSON)
    output_data: Mapped[Optional[Any]] = mapped_column(JSON)
    error_message: Mapped[Optional[str]] = mapped_column(Text)
    execution_time_ms: Mapped[Optional[int]] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
