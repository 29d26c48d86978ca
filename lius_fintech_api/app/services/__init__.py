"""
Service layer.

Each service encapsulates the business logic for one concern and
raises ``core.errors`` exceptions; the API handlers stay thin.
"""
