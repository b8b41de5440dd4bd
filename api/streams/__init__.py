"""
Stream resource: entity, persistence, validation, projection and routes.
"""
