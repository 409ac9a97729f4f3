"""
Domain models, configuration and time helpers.
"""
