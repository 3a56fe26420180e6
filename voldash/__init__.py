"""
Volatility dashboard: VIX / Nikkei-VI charts, threshold alerts and feedback.
"""

__version__ = "0.1.0"
