"""
Escalation Interfaces Layer
===========================

Interface adapters (controllers) for the escalation module.

Contains:
- Controllers: FastAPI route handlers
"""

from src.escalation.interfaces.controllers import escalation_router

__all__ = ["escalation_router"]
