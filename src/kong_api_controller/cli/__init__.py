"""Command line interface for kong-api-controller."""
