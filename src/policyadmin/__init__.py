"""Schema-driven administration of customers, insurance plans and policies."""

__version__ = "0.1.0"
