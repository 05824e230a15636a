"""
Infrastructure adapters for the network bounded context.

The local adapter runs a business network from a YAML model file with
registries stored through SQLAlchemy. It implements the same ports a
remote ledger client binding would.
"""
