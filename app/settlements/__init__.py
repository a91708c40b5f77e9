"""
Settlements app: the booking settlement core.

This app handles:
- Pricing service orders (pricing table, transport surcharge)
- Classifying talents into commission tiers
- Computing the customer charge / platform fee / talent earnings split
- Recording transactions and driving their state machine
- Reconciling asynchronous payment gateway callbacks

Related apps:
    - core: Base model, service and exception primitives

Usage:
    from settlements.services import SettlementService
    from settlements.webhooks import CallbackReconciler

    result = SettlementService.settle(order)
    CallbackReconciler().reconcile(event)
"""
