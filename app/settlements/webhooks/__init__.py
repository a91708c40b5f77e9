"""
Payment gateway callback handling.

Usage:
    from settlements.webhooks import CallbackReconciler, map_status
"""

from settlements.webhooks.reconciler import CallbackReconciler, map_status

__all__ = ["CallbackReconciler", "map_status"]
