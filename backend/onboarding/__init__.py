"""Employee onboarding backend."""
