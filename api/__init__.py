"""
API module for the price research system.
Provides the FastAPI REST API under /api.
"""

__all__ = ['app', 'routes', 'models', 'middleware']
