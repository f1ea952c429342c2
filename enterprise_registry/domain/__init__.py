"""
Domain Layer - Registry Records

This layer contains:
- Entities: Enterprise and Establishment records with their wire representation
- Projections: The fixed natural-key slices of the denomination and address tables

No external dependencies allowed in this layer.
"""
