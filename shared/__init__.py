"""
Shared infrastructure for the Press Kit Builder service.

This package is intentionally small and focused. It currently provides:

- `shared.config` for environment-based configuration
- `shared.logging` for structlog-based structured logging
- `shared.db` for database connection and session management
- `shared.tables` for the SQLAlchemy Core schema definitions

Service code should treat `shared/` as infrastructure and keep
request-specific logic in `api/`.
"""
