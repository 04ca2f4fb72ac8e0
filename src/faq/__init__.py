"""
FAQ Matching Module
===================

Bounded Context for answering customer questions from the FAQ corpus.

Responsibilities:
- Score FAQ entries against a free-text query (trigram similarity)
- Apply the confidence threshold and rank by scooter-model affinity
- Decide between auto-answer and escalation to human support
- Record views and helpful/not-helpful votes atomically
"""

__version__ = "1.0.0"
