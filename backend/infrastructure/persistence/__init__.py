"""
Persistence layer: Django ORM models, mappers and repository adapters.
"""
