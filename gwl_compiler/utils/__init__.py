"""Logging configuration and filesystem helpers."""
