"""Simulated payment step for instant approval."""
