"""Package resolution and processing."""
