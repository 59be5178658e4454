from sqlalchemy.dialects.postgresql import JSONB

from ..extensions import db


class LogEntry(db.Model):
    """
    One ingested event.

    On PostgreSQL the table is created by PartitionRepository.ensure_storage()
    as PARTITION BY RANGE (time) with PRIMARY KEY (id, time); on other engines
    this model is created as-is.
    """
    __tablename__ = "logs"

    # insertion order, tie-break for equal times
    id = db.Column(db.BigInteger().with_variant(db.Integer(), "sqlite"), primary_key=True, autoincrement=True)

    source = db.Column(db.Text, nullable=False, index=True)
    props = db.Column(db.JSON().with_variant(JSONB(), "postgresql"), nullable=False)

    time = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), server_default=db.func.now(), nullable=False)
