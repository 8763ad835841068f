"""Employer registration submitter."""
