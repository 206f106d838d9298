"""API Layer: GraphQL schema, REST health routes and error handlers.

Invariants:
    - Routers registered explicitly in main.py (no auto-discovery)
    - Thin resolvers and routes delegate to services/
"""
