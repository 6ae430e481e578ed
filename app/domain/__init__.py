"""
Domain layer package.

Purchase lifecycle rules, portfolio deduction and the ports the
workflow needs. No framework imports, no IO, no side effects.
"""
