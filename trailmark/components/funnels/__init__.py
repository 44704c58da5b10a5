"""
Funnels component - Step-by-step conversion through ordered steps.
"""

from .component import (
    DEFAULT_WINDOW_DAYS,
    analyze_funnel,
    funnel_window,
    round_one_decimal,
    run_funnel_analysis,
    step_matches,
    steps_reached,
)
from .models import (
    FunnelAnalysisInput,
    FunnelAnalysisOutput,
    FunnelResult,
    FunnelValidationError,
    StepResult,
)

__all__ = [
    # Entry points
    "run_funnel_analysis",
    "analyze_funnel",
    # Helpers
    "DEFAULT_WINDOW_DAYS",
    "funnel_window",
    "round_one_decimal",
    "step_matches",
    "steps_reached",
    # Models
    "FunnelAnalysisInput",
    "FunnelAnalysisOutput",
    "FunnelResult",
    "FunnelValidationError",
    "StepResult",
]
