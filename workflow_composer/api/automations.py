from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from workflow_composer.database import get_db
from workflow_composer.schemas.workflow import AutomationInDB
from workflow_composer.services.workflow_service import AutomationService

router = APIRouter()

@router.get("", response_model=List[AutomationInDB])
async def get_automations(
    user_id: str,
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db)
):
    return await AutomationService.get_for_user(db, user_id, skip=skip, limit=limit)

@router.get("/{automation_id}", response_model=AutomationInDB)
async def get_automation(
    automation_id: str,
    db: AsyncSession = Depends(get_db)
):
    automation = await AutomationService.get_by_id(db, automation_id)
    if not automation:
        raise HTTPException(status_code=404, detail="Automation not found")
    return automation
