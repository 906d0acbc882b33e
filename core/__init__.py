"""Validation, logging and support helpers shared by the calculation engines."""
