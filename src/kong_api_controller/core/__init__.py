"""Core application infrastructure (configuration and reconciliation errors)."""
