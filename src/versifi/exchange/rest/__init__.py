from .rest_private import VersifiPrivateRest

__all__ = ['VersifiPrivateRest']
