"""
Shared error handling package.

Centralizes error-to-HTTP mapping so that copytrade domain errors
are consistently translated into API responses.
"""
