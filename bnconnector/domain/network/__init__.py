"""
Network bounded context: domain layer.

Describes what the connector needs from a business network client
and how declared model types map onto ORM concepts.
"""
