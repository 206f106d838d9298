"""GraphQL API: Strawberry schema, context, permissions and resolvers.

Invariants:
    - Resolvers never contain business rules; they validate input, authenticate,
      and delegate to services/
    - Domain errors reach clients with extensions.code; anything else is masked
"""
