# src/prescription_sync/sync/__init__.py

from .queue import PendingPrescriptionQueue, PendingPrescription
from .reconciler import OfflineReconciler, SyncReport

__all__ = [
    "PendingPrescriptionQueue",
    "PendingPrescription",
    "OfflineReconciler",
    "SyncReport",
]
