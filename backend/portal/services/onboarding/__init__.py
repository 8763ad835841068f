"""Onboarding orchestration."""
