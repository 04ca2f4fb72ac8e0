"""
Escalation Module
=================

Bounded Context for queries handed over to human support.

Responsibilities:
- Open a pending escalation when the FAQ corpus has no confident answer
- Let admins assign, resolve and close escalated queries
- Enforce the pending -> in_progress -> resolved lifecycle (closed from any)
"""

__version__ = "1.0.0"
