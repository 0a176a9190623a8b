"""Infrastructure layer: configuration and settings."""
