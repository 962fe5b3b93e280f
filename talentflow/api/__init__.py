"""
HTTP surface of the assessment engine, standing in for the mock API the
assessment pages talk to.
"""

from .app import create_app

__all__ = ['create_app']
