"""Shared utilities: logging setup and the worker pool."""
