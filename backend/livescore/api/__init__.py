"""JSON HTTP blueprints mounted under /api."""
