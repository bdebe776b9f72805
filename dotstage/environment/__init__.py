"""Variable sources and host environment."""
