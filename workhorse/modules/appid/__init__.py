"""App identity discovery."""

from .identity import AppIdentity
from .loader import ENV_IDENTITY_PATH, IdentityLoader

__all__ = ['AppIdentity', 'IdentityLoader', 'ENV_IDENTITY_PATH']
