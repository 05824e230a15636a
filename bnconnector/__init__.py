"""
Business Network Connector: ORM bridge for ledger business networks.

Package root. A small hexagonal (ports & adapters) application that lets
an ORM-style data-access layer read and write the assets, participants and
transactions of a deployed business network.

Bounded contexts:
    - network: Connection lifecycle, type resolution, CRUD mediation,
      schema discovery.

Layers:
    - domain: Entities, ports (ABCs), errors, pure resolution/schema logic.
    - application: The connector service and its calling conventions.
    - infrastructure: Adapters implementing the ledger ports locally.
    - interfaces: FastAPI routers, Pydantic schemas.
    - shared: Cross-cutting concerns (errors, security, logging).
"""
