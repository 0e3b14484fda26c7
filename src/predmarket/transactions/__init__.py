"""Transaction submission, validation, and status tracking."""

from predmarket.transactions.orchestrator import TransactionOrchestrator, contract_call

__all__ = ["TransactionOrchestrator", "contract_call"]
