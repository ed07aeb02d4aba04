"""Shared helpers used across the simulator packages."""
