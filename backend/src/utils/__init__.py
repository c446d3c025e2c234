"""Utility modules for the snow forecast backend."""
