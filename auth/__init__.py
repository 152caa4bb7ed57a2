"""
Auth package: bearer token service (HS256, standard library only) and its configuration.
"""
from . import jwt, config

__all__ = ["jwt", "config"]
