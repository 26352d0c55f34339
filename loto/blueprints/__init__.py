"""
LOTO Forms Service
Blueprint registry.
"""
