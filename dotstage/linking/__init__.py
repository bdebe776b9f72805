"""External link manager integration."""
