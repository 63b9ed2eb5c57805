"""Data models for gpureset.

This module exports the core data structures used throughout the application.
"""

from gpureset.models.action import (
    ActionResult,
    ActionType,
    RemediationAction,
    RestorationTarget,
)
from gpureset.models.classification import ClassificationResult, Label
from gpureset.models.inventory import InventoryItem, ItemKind
from gpureset.models.report import RunReport, RunStage, StepResult

__all__ = [
    "ActionResult",
    "ActionType",
    "ClassificationResult",
    "InventoryItem",
    "ItemKind",
    "Label",
    "RemediationAction",
    "RestorationTarget",
    "RunReport",
    "RunStage",
    "StepResult",
]
