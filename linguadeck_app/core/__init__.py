"""Core infrastructure: bootstrap, logging, error handling, module registry."""
