"""
Read-only status surface for a running session.
"""
