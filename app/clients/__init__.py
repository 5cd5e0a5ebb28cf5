# app/clients/__init__.py

"""
Cache backend clients.

Import directly from the specific modules to avoid circular dependencies.
"""
