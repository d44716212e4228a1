"""
Chat agent: intent classification and screened action dispatch.
"""

from .classifier import (
    AnthropicIntentClassifier,
    IntentClassifier,
    LocalIntentClassifier,
    build_classifier,
)
from .handlers import HANDLERS, ActionContext, AgentServices
from .models import ActionIntent, ActionResult, ParsedAction
from .router import ActionRouter

__all__ = [
    "AnthropicIntentClassifier",
    "IntentClassifier",
    "LocalIntentClassifier",
    "build_classifier",
    "HANDLERS",
    "ActionContext",
    "AgentServices",
    "ActionIntent",
    "ActionResult",
    "ParsedAction",
    "ActionRouter",
]
