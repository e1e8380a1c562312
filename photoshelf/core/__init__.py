"""Configuration, logging, security and exception types."""
