"""
restbase - RESTful JSON resource APIs over SQLAlchemy models.

Register SQLAlchemy models as resources and serve them with list/show
endpoints that support search, filtering, sorting, pagination, field
selection and includes, wrapped in consistent success and error envelopes.
"""

from restbase.version import __version__

__all__ = ["__version__"]
