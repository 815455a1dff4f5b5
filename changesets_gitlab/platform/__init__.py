"""Process and filesystem access."""
