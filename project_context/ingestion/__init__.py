"""Source ingestion: discover → chunk"""
from .discovery import SourceFileDiscoverer

__all__ = ["SourceFileDiscoverer"]
