"""BookXchange vertical — campus textbook exchange marketplace.

Puts the shared patterns to work in one domain:
- Document store collections for users, books, comments, transactions
- Listing catalog with image uploads and type-dependent rules
- Transaction negotiation state machine
- Role-merged paginated transaction queries
- FastAPI router with caller identity from middleware
- Dataclass configuration
"""
