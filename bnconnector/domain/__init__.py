"""
Domain layer package.

Contains the connector's pure logic: entities, port interfaces, errors,
type resolution and schema generation. No framework imports, no IO.
"""
