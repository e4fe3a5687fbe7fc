"""
Access lists and permission resolution.
"""
