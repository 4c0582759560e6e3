"""Route model and route file readers."""
