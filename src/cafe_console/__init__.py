"""
Café admin console: Flask app factory, request context, services and routes.
"""
