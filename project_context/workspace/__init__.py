"""Workspace root resolution"""
from .root_resolver import find_common_workspace_root

__all__ = ["find_common_workspace_root"]
