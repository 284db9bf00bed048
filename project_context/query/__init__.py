"""Context queries"""
from .facade import ContextQueryFacade

__all__ = ["ContextQueryFacade"]
