from .rest import VersifiPrivateRest
from .ws import VersifiPrivateWebsocket

__all__ = ['VersifiPrivateRest', 'VersifiPrivateWebsocket']
