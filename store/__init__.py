"""User account storage."""
