"""
Infrastructure layer package.

Contains concrete implementations (adapters) of the ports
defined in the domain layer: the SQL database, the audit
log table and outbound notification webhooks.
"""
