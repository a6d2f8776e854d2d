"""Core type definitions."""

from typing import NewType

# Site-relative URL path (e.g., "/about", "/fr/blog/post")
# Distinct from filesystem Path to catch type mismatches
URLPath = NewType("URLPath", str)
