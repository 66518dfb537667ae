"""
Signatures module: the public side of the guestbook.

Scope:
- POST /api/sign (validate + store a signature)
- GET /api/entries (paginated listing, email never exposed)
- GET /api/stats (public counters)
"""
