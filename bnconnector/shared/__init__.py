"""
Shared module package.

Contains cross-cutting concerns:
- Error handling and mapping
- Security headers and rate limiting
- Logging configuration
"""
