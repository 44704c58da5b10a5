"""
Classify component - Bot and server traffic detection by user agent.
"""

from .component import (
    classify_user_agent,
    is_bot_agent,
    is_server_agent,
    normalize_user_agent,
)
from .models import DEFAULT_CONFIG, ClassifierConfig, UAFlags

__all__ = [
    "DEFAULT_CONFIG",
    "ClassifierConfig",
    "UAFlags",
    "classify_user_agent",
    "is_bot_agent",
    "is_server_agent",
    "normalize_user_agent",
]
