"""
Utility package exports
"""

from slack_archiver.utils.identifiers import IdentifierSet, resolve

__all__ = ["IdentifierSet", "resolve"]
