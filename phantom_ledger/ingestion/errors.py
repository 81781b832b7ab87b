"""File-level errors raised while opening or reading a statement."""

from ..models import FailureReason


class StatementParseError(Exception):
    """
    A statement file that cannot be processed.

    `message` is safe to show to users; `code` is for callers and logs.
    """
    def __init__(self, code: FailureReason, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"StatementParseError(code={self.code.value!r}, message={self.message!r})"
