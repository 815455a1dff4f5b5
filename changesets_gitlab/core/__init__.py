"""Core domain types: results, exit codes and the run context."""

from .context import ContextError, ReleaseContext, ReleaseInputs, load_context
from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # context
    "ContextError",
    "ReleaseContext",
    "ReleaseInputs",
    "load_context",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
