"""
                Am Thuc Phuong Nam API

REST backend for a Southern-Vietnamese restaurant: menu and category
management, table reservations, customer accounts and an AI chat
assistant.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
