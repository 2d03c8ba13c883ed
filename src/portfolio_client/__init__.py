"""Portfolio client: ledger construction, valuation and caching for a cloud portfolio tracker."""

__version__ = "0.1.0"
