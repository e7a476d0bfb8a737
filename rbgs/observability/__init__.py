"""Logging and metrics for rbgs."""
