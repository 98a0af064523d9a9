"""Styling helpers for the desktop client."""
