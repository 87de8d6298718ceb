"""Workhorse: a service template wiring config, CLI, HTTP, logging and metrics."""

__version__ = "0.1.0"
