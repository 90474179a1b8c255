"""Pydantic Schemas: request/response contracts for the users and tasks endpoints.

Invariants:
    - Schemas validate at the system boundary (request bodies, rendered documents)
    - Wire names are camelCase with "_id"; Python attributes stay snake_case

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence (ADR: DDD boundary)
    - Required-field checks live in services/, so missing fields yield the fixed
      "<a> and <b> are required" message instead of a generic validation error
"""
