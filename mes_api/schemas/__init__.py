"""
Pydantic schemas for request/response payloads, grouped per domain.
"""
