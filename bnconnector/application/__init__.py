"""
Application layer package.

Services that coordinate domain logic and ports to fulfil the
operations exposed to the ORM host. No framework imports allowed.
"""
