"""
Interfaces layer package.

FastAPI routers and Pydantic schemas for the purchase API and the
health probe. Routes call use cases and return responses.
"""
