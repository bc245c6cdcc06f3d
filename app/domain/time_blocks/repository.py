"""Time block repository - Database operations for blocked periods"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import TimeBlock


class TimeBlockRepository:
    """Repository for time block database operations"""

    @staticmethod
    def list_active(db: Session) -> list[TimeBlock]:
        """Active blocks, oldest first"""
        return (
            db.query(TimeBlock)
            .filter(TimeBlock.active.is_(True))
            .order_by(TimeBlock.created_at.asc(), TimeBlock.id.asc())
            .all()
        )

    @staticmethod
    def get_by_id(db: Session, block_id: str) -> Optional[TimeBlock]:
        return db.query(TimeBlock).filter(TimeBlock.id == block_id).first()

    @staticmethod
    def create(db: Session, **block_data) -> TimeBlock:
        block = TimeBlock(**block_data)
        db.add(block)
        db.commit()
        db.refresh(block)
        return block

    @staticmethod
    def update(db: Session, block: TimeBlock, **updates) -> TimeBlock:
        for key, value in updates.items():
            if hasattr(block, key):
                setattr(block, key, value)
        db.commit()
        db.refresh(block)
        return block
