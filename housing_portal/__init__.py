"""
Client toolkit for the affordable-housing project management API.
"""

__version__ = "0.3.0"
