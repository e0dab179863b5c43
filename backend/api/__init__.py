"""API route handlers."""
from . import accounts, assets, budgets, investments, market_data, transactions

__all__ = ["accounts", "assets", "budgets", "investments", "market_data", "transactions"]
