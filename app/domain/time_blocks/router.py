"""Time block router - FastAPI endpoints for blocked periods"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import TimeBlock
from .schemas import TimeBlockCreate, TimeBlockResponse, TimeBlockUpdate
from .service import TimeBlockService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/time-blocks", tags=["Time Blocks"])


def get_time_block_service(db: Session = Depends(get_db)) -> TimeBlockService:
    """Dependency injection for TimeBlockService"""
    return TimeBlockService(db)


def to_response(block: TimeBlock) -> TimeBlockResponse:
    return TimeBlockResponse(
        id=block.id,
        type=block.type,
        reason=block.reason,
        startsAt=block.starts_at,
        endsAt=block.ends_at,
        isRecurring=block.is_recurring,
        recurringDays=block.recurring_days or [],
        active=block.active,
        createdAt=block.created_at,
    )


@router.get("", response_model=list[TimeBlockResponse])
async def list_time_blocks(service: TimeBlockService = Depends(get_time_block_service)):
    """List active time blocks"""
    return [to_response(block) for block in service.list_blocks()]


@router.post("", response_model=TimeBlockResponse, status_code=status.HTTP_201_CREATED)
async def create_time_block(
    data: TimeBlockCreate,
    service: TimeBlockService = Depends(get_time_block_service),
):
    """Block a period (lunch, break, day off, vacation...)"""
    return to_response(service.create_block(data))


@router.get("/{block_id}", response_model=TimeBlockResponse)
async def get_time_block(
    block_id: str,
    service: TimeBlockService = Depends(get_time_block_service),
):
    """Get a specific time block"""
    return to_response(service.get_block(block_id))


@router.patch("/{block_id}", response_model=TimeBlockResponse)
async def update_time_block(
    block_id: str,
    data: TimeBlockUpdate,
    service: TimeBlockService = Depends(get_time_block_service),
):
    """Update a time block"""
    return to_response(service.update_block(block_id, data))


@router.delete("/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_time_block(
    block_id: str,
    service: TimeBlockService = Depends(get_time_block_service),
):
    """Deactivate a time block"""
    service.remove_block(block_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
