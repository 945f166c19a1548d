"""Follow-up Engine - retention check-in scheduling and outcome ledger."""
