"""
Application Layer - Repository Contracts

Defines what the registry needs from persistence; the infrastructure layer
provides it.
"""
