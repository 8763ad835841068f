"""Status polling for employers awaiting review."""
