"""
Domain Layer Package

Gold price entities, pricing and forecasting rules, and the interfaces
the outer layers implement. No framework or infrastructure dependencies.
"""

from dhab.domain import entities, gateways, ports, repositories, services

__all__ = ["entities", "gateways", "repositories", "services", "ports"]
