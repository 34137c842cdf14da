"""Quillify - personal book tracking.

Email/password accounts with verified emails, password resets and a
per-user book catalog, served as a JSON API.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
