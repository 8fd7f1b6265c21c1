"""Runtime helpers: logging, environment, serialization."""
