"""Shared utilities."""

from src.util.fs_util import FSUtil

__all__ = ["FSUtil"]
