"""
Multi-tenant manufacturing execution system backend.

Run with:
    uvicorn mes_api.api.main:app
"""

__version__ = "0.1.0"
