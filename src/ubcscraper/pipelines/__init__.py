"""
Snapshot -> database pipeline.
"""

from .load_catalog import load_catalog
from .projector import project_catalog

__all__ = ["load_catalog", "project_catalog"]
