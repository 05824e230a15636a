"""
Application layer for the network bounded context.
"""
