"""
Backend API access: envelope handling and resource operations.
"""

from .client import ApiClient, Envelope, ResourceClient

__all__ = ['ApiClient', 'Envelope', 'ResourceClient']
