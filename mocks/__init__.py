"""
Mock upstream services for local runs and integration tests.
"""
