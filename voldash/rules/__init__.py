"""
Alert rule catalog.
"""
