"""Submodule inspection commands."""
