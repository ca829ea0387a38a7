"""Off-chain CBT ledger."""

from culturebridge.ledger.gateway import CreditReceipt, LedgerGateway, SqlLedgerGateway

__all__ = ["CreditReceipt", "LedgerGateway", "SqlLedgerGateway"]
