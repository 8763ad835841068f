"""Product catalog accessor."""
