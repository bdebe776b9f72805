"""Domain models and settings."""
