"""
Feature modules live under this package.

Each module owns its models, service layer, blueprints and tests, and reuses
the platform primitives (config, DB session, envelope helpers).
"""
