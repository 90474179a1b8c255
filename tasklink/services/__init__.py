"""Services Layer: the imperative shell around core/.

Invariants:
    - One operations class per resource, each owning the request's unit of work
    - Relationship decisions come from core/enforce_relationships.py; services only apply them

Design Decisions:
    - Stores and translator kept apart from operations: operations read as the protocol,
      stores read as SQL (ADR: ExMA single responsibility)
"""
