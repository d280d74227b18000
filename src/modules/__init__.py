"""Business modules for the auth service.

Each module is self-contained with its own schemas, services, and
domain logic.
"""
