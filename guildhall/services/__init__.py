"""Services Layer: profile, server, channel and member operations.

Invariants:
    - One service class per aggregate, constructed with the request's AsyncSession
    - Every role-guarded operation passes through services/authorization.py
    - Each mutating method commits exactly once
"""
