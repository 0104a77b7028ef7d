"""
Core application utilities.

This package provides:
- Application-level settings (separate from DB settings)
- Logging configuration with request/tenant context
- Token and password helpers
- Domain errors and the status-transition tables
- FastAPI dependency helpers (tenant extraction, session, current user)
"""
