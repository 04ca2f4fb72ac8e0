"""
FAQ Interfaces Layer
====================

Interface adapters (controllers) for the FAQ module.

Contains:
- Controllers: FastAPI route handlers
"""

from src.faq.interfaces.controllers import faq_router

__all__ = ["faq_router"]
