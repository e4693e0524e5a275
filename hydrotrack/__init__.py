"""Health, configuration and error-handling core for the hydration tracker backend."""
