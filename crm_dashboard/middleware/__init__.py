"""
Middleware components for request processing.

This package contains middleware for:
- Request context (request ID bound into structured logs)
- CORS for browser dashboard clients
"""

from crm_dashboard.middleware.cors import CORSMiddleware
from crm_dashboard.middleware.request_context import RequestContextMiddleware

__all__ = [
    "CORSMiddleware",
    "RequestContextMiddleware",
]
