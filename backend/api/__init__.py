"""API route handlers."""
from . import accounts, networth, plaid, transactions

__all__ = ["accounts", "networth", "plaid", "transactions"]
