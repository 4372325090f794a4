"""Configuration, logging, errors, security and storage."""
