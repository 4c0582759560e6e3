"""Survey data models."""
