"""
Identity: who is the acting learner.
"""

from moono.kernel.identity.identity_service import AuthProvider, AnonymousIdentityService

__all__ = [
    "AuthProvider",
    "AnonymousIdentityService",
]
