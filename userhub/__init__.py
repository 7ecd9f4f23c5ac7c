"""Userhub: account registration, JWT login, role-gated account CRUD and inactivity reports."""

__version__ = "0.1.0"
