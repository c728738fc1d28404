"""
Security utilities for admin credentials.
"""

from .passwords import hash_password, verify_dummy_password, verify_password

__all__ = ["hash_password", "verify_dummy_password", "verify_password"]
