"""Test helper modules for the gitcheckout test suite.

- git_helpers: real repositories, fake submodules and config inspection
"""
from __future__ import annotations
