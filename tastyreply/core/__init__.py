"""Configuration, logging, metrics and error taxonomy."""
