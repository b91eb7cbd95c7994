"""
Services layer.

- crud: BaseRepository and the CatalogStore persistence contract
- catalog: CompositionResolver, DependencyGuard
- domain: CRUD services and AvailabilityService
"""
