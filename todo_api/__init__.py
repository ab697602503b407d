"""To-do list API with email-verified accounts and role-based access."""

__version__ = "0.1.0"
