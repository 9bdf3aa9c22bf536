"""
Seed data loading.

Responsibilities:
- Read users, profiles and relationships from CSV seed files.
- Normalize empty cells and list-valued columns.
- Populate the in-memory discovery stores.
"""
