"""Storefront admin API: Google-backed admin sessions and static-token access."""

__version__ = "1.0.0"
