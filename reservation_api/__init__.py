"""
                Restaurant Reservation API

Async backend for a restaurant: customers register, reserve tables and
place food orders; administrators manage tables, the menu, reservations,
orders and user roles.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
