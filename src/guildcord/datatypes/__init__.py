"""
Shared value types: Discord identifier wrappers and the permission tier enum.
"""
