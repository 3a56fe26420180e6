"""
Store access: connection backends, row models and repositories.
"""
