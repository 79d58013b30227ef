"""Mall admin REST API: categories, products, admin users and access control."""

__version__ = "1.0.0"
