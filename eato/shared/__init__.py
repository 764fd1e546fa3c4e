"""
Code shared between services.

Modules:
- models: DTOs and pydantic models
- errors: error taxonomy mapped to HTTP statuses
"""

__all__: list[str] = []
