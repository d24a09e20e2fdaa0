"""Storage boundaries for the ledger maps."""
