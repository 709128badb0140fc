"""
Chain middlewares in front of a handler, with explicit continuations.
"""

import logging

from .core import (
    DEFAULT_STATUS,
    Next,
    Pipeline,
    PipelineError,
    SyncPipeline,
    ValidationError,
    is_error,
    merge_args,
    normalize_error,
    pipe,
    pipe_sync,
    wrap_error,
)

__all__ = [
    "DEFAULT_STATUS",
    "Next",
    "Pipeline",
    "PipelineError",
    "SyncPipeline",
    "ValidationError",
    "is_error",
    "merge_args",
    "normalize_error",
    "pipe",
    "pipe_sync",
    "wrap_error",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
