"""
Copytrade bounded context: infrastructure adapters.

SQLAlchemy implementations of the repository and ledger ports,
the unit of work, the audit log table writer and the webhook notifier.
"""
