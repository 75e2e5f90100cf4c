"""
Import pipeline that keeps the searchable index in step with upstream sources.
"""
