"""
Authentication Infrastructure
"""

from .authentication_manager import HttpAuthenticationManager

__all__ = ["HttpAuthenticationManager"]
