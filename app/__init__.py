"""Application wiring: explicit context, service registry and session."""
