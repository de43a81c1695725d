"""Configuration, security and error types."""
