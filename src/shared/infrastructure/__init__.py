"""
Infrastructure Layer
=====================

Low-level technical concerns:
- Logging setup
- Correlation-aware loggers
- Latency timing
"""
