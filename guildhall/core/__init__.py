"""Core Layer: pure domain rules, types and errors. No IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic

Design Decisions:
    - Functional core separated from the imperative shell: services/ read and
      write, core/ decides
"""
