import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from services.trait_engine.models import PredictionResult
from src.db.models import Prediction

logger = logging.getLogger(__name__)

INPUT_CONTENT_LIMIT = 500


class StorageError(Exception):
    """Raised when a prediction could not be written or read."""
    pass


class PredictionStore:
    """Persists finalized predictions. Callers treat write failures as non-fatal."""

    def __init__(self, session: Session):
        self.session = session

    def save(
        self,
        user_id: str,
        input_type: str,
        input_content: str,
        result: PredictionResult,
        share: bool = False,
    ) -> Prediction:
        record = Prediction(
            user_id=user_id,
            input_type=input_type,
            input_content=(input_content or "")[:INPUT_CONTENT_LIMIT],
            method=result.method,
            scores=dict(result.scores),
            percentiles=dict(result.percentiles),
            label=result.label,
            share=share,
        )
        try:
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to store prediction for user '{user_id}': {e}")
            raise StorageError(str(e)) from e
        logger.info(f"Stored prediction {record.id} for user '{user_id}' ({input_type}).")
        return record

    def list_for_user(self, user_id: str, limit: int = 20) -> List[Prediction]:
        stmt = (
            select(Prediction)
            .where(Prediction.user_id == user_id)
            .order_by(Prediction.created_at.desc())
            .limit(limit)
        )
        try:
            return list(self.session.scalars(stmt))
        except SQLAlchemyError as e:
            logger.error(f"Failed to list predictions for user '{user_id}': {e}")
            raise StorageError(str(e)) from e

    def get_shared(self, public_id: str) -> Optional[Prediction]:
        stmt = select(Prediction).where(Prediction.public_id == public_id, Prediction.share.is_(True))
        try:
            return self.session.scalars(stmt).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load shared prediction '{public_id}': {e}")
            raise StorageError(str(e)) from e
