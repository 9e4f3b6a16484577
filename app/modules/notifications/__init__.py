"""Notification engine.

Event registry, notification type store, template rendering, dispatch,
delivery ledger and the scheduled-delivery worker.

Usage:
    from modules.notifications.dependencies import get_dispatch_engine

    records = get_dispatch_engine().emit("kyc_approved", {"documentType": "passport"})
"""
