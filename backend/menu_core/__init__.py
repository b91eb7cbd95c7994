"""
Menu composition and branch availability engine.

Layout:
- models: SQLAlchemy records for the catalog graph and branches
- services.crud: repositories and the CatalogStore persistence contract
- services.catalog: composition resolver and dependency guard
- services.domain: CRUD services and branch availability propagation
"""
