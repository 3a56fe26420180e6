"""
Volatility series helpers.
"""
