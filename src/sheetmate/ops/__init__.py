"""Operation execution against spreadsheet hosts."""

from .executor import ApplyReport, OperationExecutor, queue_operation

__all__ = ["ApplyReport", "OperationExecutor", "queue_operation"]
