"""Built-in plugins registered by the ledger."""
