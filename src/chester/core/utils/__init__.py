"""Shared utilities for chester."""

from chester.core.utils.logging import setup_logging

__all__ = ["setup_logging"]
