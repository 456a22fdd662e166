"""
Presentation Layer Package

HTTP routers and middleware of the REST API.
"""

from dhab.presentation import controllers, middleware

__all__ = ["controllers", "middleware"]
