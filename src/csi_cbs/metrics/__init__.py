"""Prometheus metrics for the CBS controller."""
