"""
Organization application: colors, departments and organizational structures.
"""
