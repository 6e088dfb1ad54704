import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

# Define naming conventions for constraints and indexes
# https://alembic.sqlalchemy.org/en/latest/naming.html
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)
Base = declarative_base(metadata=metadata)


def _uuid_str() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Prediction(Base):
    __tablename__ = "predictions"

    id = Column(String(36), primary_key=True, default=_uuid_str)
    public_id = Column(String(36), unique=True, nullable=False, default=_uuid_str)
    user_id = Column(String(64), nullable=False)
    input_type = Column(String(16), nullable=False)  # "text" or "survey"
    input_content = Column(Text, nullable=False)
    method = Column(String(32), nullable=False)
    scores = Column(JSON, nullable=False)
    percentiles = Column(JSON, nullable=False)
    label = Column(String(32), nullable=False)
    share = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_predictions_user_id_created_at", "user_id", "created_at"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "public_id": self.public_id,
            "user_id": self.user_id,
            "input_type": self.input_type,
            "input_content": self.input_content,
            "method": self.method,
            "scores": self.scores,
            "percentiles": self.percentiles,
            "label": self.label,
            "share": self.share,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
