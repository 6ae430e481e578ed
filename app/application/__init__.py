"""
Application layer package.

Use cases that open a unit of work and drive the purchase workflow.
Each use case is a single class with one public method.
Depends on domain ports, never on infrastructure.
"""
