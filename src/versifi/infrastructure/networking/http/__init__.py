from .signer import Signer
from .structs import HTTPMethod, API_KEY_HEADER, API_SIGN_HEADER
from .rest_client import RestClient, encode_query

__all__ = ['Signer', 'HTTPMethod', 'API_KEY_HEADER', 'API_SIGN_HEADER', 'RestClient', 'encode_query']
