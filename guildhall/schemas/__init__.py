"""Pydantic Schemas: request validation for GraphQL input at the API boundary.

Invariants:
    - Schemas validate at system boundary (user input)
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
    - Separate from GraphQL input types: Strawberry types describe the wire,
      these enforce lengths and trimming
"""
