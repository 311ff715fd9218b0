"""
Basker Application Layer

This package implements the web application layer for the Basker server using the aiohttp framework.

Key Components:
- cli.py: Entry point for running the application
- server.py: Web application factory, middleware and route table
- config.py: Configuration management using Pydantic settings, and the AppKeys used for dependency injection
- handlers/: Request handlers for the admin, moderation, profile and internal endpoints
- metrics.py: Metrics client abstraction (Telegraf/StatsD or no-op)
- health.py: Failure gauge backing the readiness probe
- cors.py: CORS handling for cross-origin requests
- ratelimit.py: Per-client request limits on public routes
- util/: Operator utilities

The application uses several middleware layers:
- Error middleware that maps the Basker error taxonomy to HTTP statuses
- Statsd middleware for metrics collection
- Sentry middleware for error reporting
- CORS and security header middleware
- Rate limit middleware for /api/public-profile
"""
