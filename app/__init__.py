"""
Copytrade Back-Office: purchase lifecycle and fund accounting.

Application package root. A modular monolith using hexagonal
architecture (ports & adapters) with domain-driven design.

Bounded contexts:
    - copytrade: Purchases of copytrade options, approval, portfolio deduction.

Layers:
    - domain: Pure business logic, entities, ports (ABCs), errors.
    - application: Use cases, DTOs, post-commit side effects.
    - infrastructure: SQLAlchemy adapters, audit log, webhook notifier.
    - interfaces: FastAPI routers, Pydantic schemas.
    - shared: Cross-cutting concerns (errors, security, logging).
"""
