"""
Background schedulers: delayed one-shot jobs, presence rotation and the alive check.
"""
