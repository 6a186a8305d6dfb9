"""Role-based access control for async SQLAlchemy and FastAPI services."""

__version__ = "0.1.0"
