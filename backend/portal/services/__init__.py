"""Application services for the employer onboarding workflow."""
