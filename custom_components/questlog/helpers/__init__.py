"""Helper modules for Questlog integration.

Helpers may import Home Assistant; pure functions live in utils/.
"""
