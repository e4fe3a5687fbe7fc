"""
Prefix commands: the command base class, event parsing and dispatch.
"""
