"""
                    Digital Menu

Backend for QR-code restaurant menus: owners log in with an
email code and manage restaurants, categories and dishes;
customers browse the menu, fill a cart and track their order.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
