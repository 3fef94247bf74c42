"""Setuptools build hooks for matbridge."""

from __future__ import annotations

from setuptools import setup

# Metadata lives in pyproject.toml; the grammar file is shipped as package data
# so the local engine can load it from an installed wheel.
setup()
