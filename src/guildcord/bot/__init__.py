"""
Bot-facing layer: the runtime shared by the cogs and the cogs themselves.
"""
