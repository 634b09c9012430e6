"""External service integrations (object storage backends)."""
