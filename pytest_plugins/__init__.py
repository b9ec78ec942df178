"""Pytest plugins used by engine client test sessions."""
