"""Core pagination components."""
