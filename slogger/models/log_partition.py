from ..extensions import db


class LogPartition(db.Model):
    """Partition registry for engines without declarative partitioning."""
    __tablename__ = "log_partitions"

    name = db.Column(db.String(32), primary_key=True)    # logs_2025_01_01
    range_start = db.Column(db.DateTime(timezone=True), nullable=False, unique=True)
    range_end = db.Column(db.DateTime(timezone=True), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=db.func.now(), nullable=False)
