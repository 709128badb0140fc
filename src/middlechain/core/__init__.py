"""
Module containing core objects for building middleware pipelines and normalizing
their failures.
"""

from .errors import (
    DEFAULT_STATUS,
    PipelineError,
    ValidationError,
    is_error,
    normalize_error,
    wrap_error,
)
from .middleware import Next, merge_args
from .pipeline import Pipeline, SyncPipeline, pipe, pipe_sync

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
