"""HTTP administration surface."""
from ipacl.api import admin

__all__ = ["admin"]
