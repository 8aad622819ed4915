"""Mementote journal client: a Flask-served page over the remote journal API."""

__version__ = "0.1.0"
