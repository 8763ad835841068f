"""Session identity context."""
