"""
Moono - lesson progression engine.

Gating, step traversal, per-step interaction state machines and
completion write-back for the Moono learning app.
"""

__version__ = "0.1.0"
