"""
Enterprise Registry

Register of business entities (enterprises, establishments, denominations and
registered addresses) backed by PostgreSQL.
"""

__version__ = "0.1.0"
