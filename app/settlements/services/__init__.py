"""
Settlement services.

Usage:
    from settlements.services import SettlementService, TransactionLedger
"""

from settlements.services.ledger import TransactionLedger
from settlements.services.settlement import SettlementService

__all__ = ["SettlementService", "TransactionLedger"]
