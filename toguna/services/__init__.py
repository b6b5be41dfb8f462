"""External service wrappers and infrastructure."""
