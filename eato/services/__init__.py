"""
Domain services.
Each package holds routes, service, repository and dependencies.
"""
