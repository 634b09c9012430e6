"""Infrastructure layer: storage backends, client cache, and security."""
