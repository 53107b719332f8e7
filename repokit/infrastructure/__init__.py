"""Infrastructure layer: logging, database access."""
