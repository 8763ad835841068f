"""Cross-service building blocks: base service, errors and ports."""
