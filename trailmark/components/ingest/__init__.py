"""
Ingest component - Beacon ingestion pipeline.
"""

from .component import run_ingest
from .models import (
    DEFAULT_CONFIG,
    BeaconInput,
    IngestConfig,
    IngestOutput,
    IngestValidationError,
    RequestContext,
)

__all__ = [
    # Entry points
    "run_ingest",
    # Models
    "DEFAULT_CONFIG",
    "BeaconInput",
    "IngestConfig",
    "IngestOutput",
    "IngestValidationError",
    "RequestContext",
]
