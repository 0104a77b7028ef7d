"""
Service layer: business rules and unit-of-work orchestration over repositories.
"""
