"""Core configuration, logging and resilience utilities."""
