"""Business logic service layer for the BIOS manager."""

from .base import EventHook, MutationStatus, run_tracked_mutation
from .bios import (
    BiosPackageService,
    ConfirmCallback,
    ConfirmationRequest,
    PackageActionEvent,
    PackageOperation,
    resolve_target_date,
)

__all__ = [
    "BiosPackageService",
    "ConfirmCallback",
    "ConfirmationRequest",
    "EventHook",
    "MutationStatus",
    "PackageActionEvent",
    "PackageOperation",
    "resolve_target_date",
    "run_tracked_mutation",
]
