"""Multi-tenant CRM API for tour operators."""

__version__ = "1.0.0"
