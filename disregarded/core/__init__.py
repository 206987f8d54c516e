"""Core models, errors and helpers shared by every layer."""
