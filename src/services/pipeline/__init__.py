"""Pipeline infrastructure for report runs."""

from .base_step import PipelineStep
from .context import PipelineContext
from .pipeline import Pipeline

__all__ = [
    "PipelineStep",
    "PipelineContext",
    "Pipeline",
]
