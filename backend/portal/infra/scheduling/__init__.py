"""Timer adapters."""
