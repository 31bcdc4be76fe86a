"""Configuration, database, security and observability plumbing."""
