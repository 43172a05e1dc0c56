"""Typed exceptions for billing workflows.

Validation problems are plain ValueErrors raised before any write.
Backend failures during a write are wrapped in OperationFailedError so the
caller can tell the user which operation failed and why.
"""


class OperationFailedError(Exception):
    """
    A database write failed part way through an operation.

    The enclosing transaction has already been rolled back. The message
    carries the backend's own error text.
    """

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Error {operation}: {detail}")
