"""Error handling for stalemate.

- ErrorKind: classification of loader failures
- StaleMateError and subclasses: exceptions raised by handlers
- LoaderError: structured error record carried by Error states
- Result/Ok/Err: tagged success/failure values for concurrent batches
"""

from .errors import (
    ErrorKind,
    LoaderError,
    NoLocalDataError,
    NotSupportedError,
    PartialFetchError,
    StaleMateError,
    classify_exception,
)
from .result import Err, Ok, Result, partition_results

__all__ = [
    "ErrorKind", "LoaderError", "classify_exception",
    "StaleMateError", "NoLocalDataError", "NotSupportedError", "PartialFetchError",
    "Result", "Ok", "Err", "partition_results",
]
