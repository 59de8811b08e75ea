import hashlib
import hmac
from typing import Union


class Signer:
    """
    HMAC-SHA256 signer over the shared API secret.

    Used for REST request signatures and for the streaming auth challenge.
    Output is lowercase hex.
    """

    __slots__ = ('_secret',)

    def __init__(self, secret_key: Union[str, bytes]):
        self._secret = secret_key.encode('utf-8') if isinstance(secret_key, str) else secret_key

    def sign(self, payload: Union[str, bytes]) -> str:
        if isinstance(payload, str):
            payload = payload.encode('utf-8')
        return hmac.new(self._secret, payload, hashlib.sha256).hexdigest()

    def __repr__(self) -> str:
        return "Signer(secret_key='***')"
