"""
Certificate Authority client

Enrolls identities against a remote CA and returns their credentials.
"""

from .client import CAClient
from .enrollment import AttributeRequest, Enrollment, EnrollmentRequest

__all__ = [
    "AttributeRequest",
    "CAClient",
    "Enrollment",
    "EnrollmentRequest",
]
