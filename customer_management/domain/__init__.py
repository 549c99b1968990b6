"""
Domain Layer

Contains the customer aggregate, value objects, domain events and the
contracts (repositories and services) the outer layers implement.
"""
