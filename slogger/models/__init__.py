from .log_entry import LogEntry
from .log_partition import LogPartition

__all__ = ["LogEntry", "LogPartition"]
