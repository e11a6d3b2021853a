"""Integration packages for external services."""
