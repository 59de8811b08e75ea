from enum import Enum


class HTTPMethod(Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def signs_body(self) -> bool:
        """POST/PUT sign the JSON body, GET/DELETE sign the query string."""
        return self in (HTTPMethod.POST, HTTPMethod.PUT)


API_KEY_HEADER = "X-VERSIFI-API-KEY"
API_SIGN_HEADER = "X-VERSIFI-API-SIGN"
