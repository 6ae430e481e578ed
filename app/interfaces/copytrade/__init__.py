"""Copytrade HTTP interface: purchase routes, schemas and wiring."""
