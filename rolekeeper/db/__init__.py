"""Persistence layer: models, sessions, unit of work and seeding."""
