"""
Infrastructure layer package.

Contains concrete implementations (adapters) of the ports defined in
the domain layer: model loading, serialization and registry storage.
"""
