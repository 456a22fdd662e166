"""
Dhab - Egyptian gold price service

Layer Structure:
- Domain: Gold price entities, forecasting rules and port interfaces
- Application: Use cases and DTOs
- Infrastructure: Redis store, price API gateways, Celery tasks
- Presentation: Controllers and HTTP middleware for the REST API
- Shared: Cross-cutting concerns and shared utilities
- Main: Composition root, application entry point and configuration
"""
