"""
Definitions component - Stored reports, funnels and custom event definitions.
"""

from ._impl import (
    DefinitionService,
    create_custom_event_service,
    create_funnel_service,
    create_report_service,
    validate_custom_event,
    validate_funnel,
    validate_report,
)
from .component import run_create, run_delete, run_get, run_list, run_update
from .models import DefinitionListOutput, DefinitionOutput, DefinitionValidationError
from .ports import DefinitionRepoPort

__all__ = [
    # Entry points
    "run_create",
    "run_delete",
    "run_get",
    "run_list",
    "run_update",
    # Service
    "DefinitionService",
    "create_custom_event_service",
    "create_funnel_service",
    "create_report_service",
    "validate_custom_event",
    "validate_funnel",
    "validate_report",
    # Models
    "DefinitionListOutput",
    "DefinitionOutput",
    "DefinitionValidationError",
    # Ports
    "DefinitionRepoPort",
]
