"""
Infrastructure Layer

Contains all external dependencies and implementations:
- Database implementations
- Cache backends (in-memory and Redis)
- Remote customer service and identity provider clients
- Configuration management
- Logging infrastructure
"""
