"""
Textual application for the filterbox demo.
"""

from .filter_app import FilterApp

__all__ = ["FilterApp"]
