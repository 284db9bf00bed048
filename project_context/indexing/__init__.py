"""Incremental index updates"""
from .dispatcher import IndexUpdateDispatcher

__all__ = ["IndexUpdateDispatcher"]
