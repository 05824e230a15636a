"""
Shared error handling package.

Translates connector and ledger errors into consistent API responses.
"""
