"""Domain layer - backend records, offline ledger models and view models."""
