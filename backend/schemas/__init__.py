"""Pydantic schemas for API request/response validation."""

from .account import (
    AccountCreate,
    AccountResponse,
    AccountType,
    AccountUpdate,
    NetWorthSummary,
    SavingsBucketCreate,
    SavingsBucketResponse,
    SavingsBucketUpdate,
)
from .asset import AssetCategory, AssetCreate, AssetResponse, AssetUpdate
from .budget import BudgetCategory, BudgetCreate, BudgetPeriod, BudgetResponse, BudgetUpdate
from .investment import (
    AssetKind,
    BuyRequest,
    CashTransactionType,
    CashUpdate,
    DisposalResponse,
    HoldingResponse,
    InvestmentAccountResponse,
    InvestmentTransactionCreate,
    InvestmentTransactionResponse,
    InvestmentTransactionType,
    LotConsumptionResponse,
    LotCreate,
    LotResponse,
    LotUpdate,
    RemoveRequest,
    SellRequest,
)
from .market_data import QuoteResponse, SymbolMatchResponse
from .transaction import (
    Pagination,
    TransactionCreate,
    TransactionListResponse,
    TransactionResponse,
    TransactionType,
    TransactionUpdate,
)
