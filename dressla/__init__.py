"""Dressla.

Backend for a clothing rental and resale marketplace.

High-level architecture
-----------------------

- ``dressla.core``: logging, monitoring, database entities, repositories and
  the I/O schemas shared by the API layer.
- ``dressla.marketplace``: framework-free business rules (rental availability,
  rental pricing, catalog filtering, payment status mapping and split
  calculations, seller revenue thresholds, slugs and SKUs).
- ``dressla.server``: the FastAPI application, its routers, security and the
  services that orchestrate checkout and payment gateway calls.
"""

__version__ = "0.1.0"
