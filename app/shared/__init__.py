"""
Shared module package.

Cross-cutting concerns: error mapping, security headers,
rate limiting and logging configuration.
"""
