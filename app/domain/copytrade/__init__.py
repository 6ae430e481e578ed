"""
Copytrade bounded context: domain layer.

This module contains all domain logic for copytrade purchases:
- Purchase lifecycle (pending -> active | rejected)
- Portfolio entry deduction on approval
- Status transition rules
"""
