"""Local HTTP facade over the application services."""
