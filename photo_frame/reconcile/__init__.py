"""Filesystem-to-registry reconciliation."""

from .reconciler import Reconciler, ReconcileResult
from .service import ReconcilerService, seconds_until

__all__ = ['Reconciler', 'ReconcileResult', 'ReconcilerService', 'seconds_until']
