"""Credential strategy commands."""
