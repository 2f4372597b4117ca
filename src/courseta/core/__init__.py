"""Core domain values shared by the session feature and the adapters."""
