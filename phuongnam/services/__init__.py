"""
                        Services Module

Business logic behind the HTTP routers. Routers decode requests and
build envelopes; services validate, query and persist.

Services:
    - reservations: Booking validation, conflict detection and CRUD
    - foods: Menu items, search and statistics
    - categories: Menu categories
    - customers: Accounts and JWT authentication
    - ai: Chat assistant with mock/Gemini/Groq providers
    - query, pagination: Shared list filtering and paging
"""
