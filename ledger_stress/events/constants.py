"""Notification categories emitted by the accounting service."""

POST_LEDGER = "post-ledger"
POST_ACCOUNT = "post-account"

__all__ = ["POST_ACCOUNT", "POST_LEDGER"]
