"""
Destinations service.

REST API for cities and their seasonal travel windows.
"""

__version__ = "0.1.0"
