"""
Alert subscriptions.
"""
