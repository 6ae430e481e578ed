"""
Application layer for the copytrade bounded context.

Use cases open the unit of work, call the workflow engine and return
DTOs. Side effects (audit, notifications) run only after commit.
No framework imports allowed.
"""
