"""Filesystem and settings helpers"""
from .fs import path_to_uri, uri_to_path
from .settings import Settings, load_settings, normalize_extensions

__all__ = ["Settings", "load_settings", "normalize_extensions", "path_to_uri", "uri_to_path"]
