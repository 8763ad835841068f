"""Payment processor adapters."""
