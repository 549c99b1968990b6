"""
Customer management

Domain model, repository and remote-service contracts, and their
infrastructure implementations for managing customers.
"""

__version__ = "1.0.0"
