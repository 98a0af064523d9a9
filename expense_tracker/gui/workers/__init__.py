"""Background job helpers for the GUI."""
