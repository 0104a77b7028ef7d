"""
Test suite for the MES API.

Covers the status workflows, the service layer (production, master data,
inventory, equipment, security, audit, dashboard, reports) against an
in-memory SQLite database, and the HTTP surface through the ASGI app.
"""
