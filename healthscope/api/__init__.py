"""
API package initialization.
"""

from healthscope.api.v1 import router

__all__ = ["router"]
