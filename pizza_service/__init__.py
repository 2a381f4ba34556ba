"""
                JWT Pizza Service

REST backend for the JWT Pizza ordering demo: diners, franchises,
stores, a shared menu and orders fulfilled by the pizza factory.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
