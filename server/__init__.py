"""HTTP host shell for the ledger."""
