"""
ORM adapters for ormtenant.
"""
