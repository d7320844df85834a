"""
Billing package - plans, subscriptions, usage metering and payments.

This package integrates with:
- Stripe: Hosted checkout, subscriptions and the customer portal

Usage is metered locally in an append-only ledger; Stripe never sees it.
"""
