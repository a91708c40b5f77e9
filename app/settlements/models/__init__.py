"""
Settlement models.

Usage:
    from settlements.models import Transaction
"""

from settlements.models.transaction import Transaction

__all__ = ["Transaction"]
