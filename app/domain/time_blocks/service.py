"""Time block service - Business logic for blocked periods"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...config import BUSINESS_TIMEZONE
from ...models import TimeBlock
from ...shared.exceptions import NotFoundError, ValidationError
from ...utils.sanitization import clean_text
from ..scheduling.intervals import Interval, ensure_ordered, minutes_of_day, overlaps, time_of_day_overlaps
from ..scheduling.time_utils import local_weekday, to_local, to_utc
from .repository import TimeBlockRepository
from .schemas import TimeBlockCreate, TimeBlockUpdate

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

BLOCK_LABELS = {
    "LUNCH": "lunch break",
    "BREAK": "break",
    "DAY_OFF": "day off",
    "VACATION": "vacation",
    "CUSTOM": "blocked period",
}


def _local_minutes(interval: Interval, tz_name: str) -> tuple[int, int]:
    local_start = to_local(interval.start, tz_name)
    local_end = to_local(interval.end, tz_name)
    end_minutes = minutes_of_day(local_end)
    if local_end.date() != local_start.date():
        end_minutes = MINUTES_PER_DAY
    return minutes_of_day(local_start), end_minutes


def block_covers(block: TimeBlock, candidate: Interval, tz_name: str = BUSINESS_TIMEZONE) -> bool:
    """
    One-off blocks cover what they overlap. Recurring blocks repeat their
    wall-clock window on each of ``recurring_days`` (business timezone).
    """
    block_interval = Interval(block.starts_at, block.ends_at)
    if not block.is_recurring:
        return overlaps(candidate, block_interval)

    if local_weekday(candidate.start, tz_name) not in (block.recurring_days or []):
        return False
    candidate_start, candidate_end = _local_minutes(candidate, tz_name)
    block_start, block_end = _local_minutes(block_interval, tz_name)
    return time_of_day_overlaps(candidate_start, candidate_end, block_start, block_end)


def describe_block(block: TimeBlock, tz_name: str = BUSINESS_TIMEZONE) -> str:
    label = BLOCK_LABELS.get(block.type, "blocked period")
    reason = f" ({block.reason})" if block.reason else ""
    start = to_local(block.starts_at, tz_name)
    end = to_local(block.ends_at, tz_name)
    return (
        f"This time is not available. There is a {label}{reason} "
        f"from {start:%H:%M} - {end:%H:%M}"
    )


class TimeBlockService:
    """Service layer for time block business logic"""

    def __init__(self, db: Session, repo: Optional[TimeBlockRepository] = None):
        self.db = db
        self.repo = repo or TimeBlockRepository()

    def list_blocks(self) -> list[TimeBlock]:
        return self.repo.list_active(self.db)

    def get_block(self, block_id: str) -> TimeBlock:
        block = self.repo.get_by_id(self.db, block_id)
        if not block or not block.active:
            raise NotFoundError("time block")
        return block

    def find_blocking(self, candidate: Interval, tz_name: str = BUSINESS_TIMEZONE) -> Optional[TimeBlock]:
        """Earliest-created active block covering ``candidate``, if any"""
        for block in self.repo.list_active(self.db):
            if block_covers(block, candidate, tz_name):
                return block
        return None

    def create_block(self, data: TimeBlockCreate) -> TimeBlock:
        starts_at = to_utc(data.startsAt, data.timezone)
        ends_at = to_utc(data.endsAt, data.timezone)
        ensure_ordered(starts_at, ends_at)

        if data.isRecurring and not data.recurringDays:
            raise ValidationError("recurringDays is required for recurring blocks")

        block = self.repo.create(
            self.db,
            type=data.type.value,
            reason=clean_text(data.reason, max_length=200),
            starts_at=starts_at,
            ends_at=ends_at,
            is_recurring=data.isRecurring,
            recurring_days=data.recurringDays or [],
        )
        logger.info(f"✅ Time block {block.id} created ({block.type})")
        return block

    def update_block(self, block_id: str, data: TimeBlockUpdate) -> TimeBlock:
        block = self.get_block(block_id)

        updates = {}
        if data.type is not None:
            updates["type"] = data.type.value
        if "reason" in data.model_fields_set:
            updates["reason"] = clean_text(data.reason, max_length=200)
        if data.startsAt is not None:
            updates["starts_at"] = to_utc(data.startsAt, data.timezone)
        if data.endsAt is not None:
            updates["ends_at"] = to_utc(data.endsAt, data.timezone)
        if data.isRecurring is not None:
            updates["is_recurring"] = data.isRecurring
        if data.recurringDays is not None:
            updates["recurring_days"] = data.recurringDays
        if data.active is not None:
            updates["active"] = data.active

        ensure_ordered(
            updates.get("starts_at", block.starts_at), updates.get("ends_at", block.ends_at)
        )
        is_recurring = updates.get("is_recurring", block.is_recurring)
        if is_recurring and not updates.get("recurring_days", block.recurring_days):
            raise ValidationError("recurringDays is required for recurring blocks")

        return self.repo.update(self.db, block, **updates)

    def remove_block(self, block_id: str) -> None:
        """Soft delete: the block stops blocking but stays on record"""
        block = self.get_block(block_id)
        self.repo.update(self.db, block, active=False)
        logger.info(f"🗑️ Time block {block_id} deactivated")
