"""Gemini status codes.

See: gemini://gemini.circumlunar.space/docs/specification.gmi
"""

from enum import Enum, IntEnum, auto


class StatusCategory(Enum):
    """The first digit of a status code."""
    INPUT = auto()
    SUCCESS = auto()
    REDIRECT = auto()
    TEMPORARY_FAILURE = auto()
    PERMANENT_FAILURE = auto()
    CLIENT_CERTIFICATE = auto()


_CATEGORIES: dict[int, StatusCategory] = {
    1: StatusCategory.INPUT,
    2: StatusCategory.SUCCESS,
    3: StatusCategory.REDIRECT,
    4: StatusCategory.TEMPORARY_FAILURE,
    5: StatusCategory.PERMANENT_FAILURE,
    6: StatusCategory.CLIENT_CERTIFICATE,
}


class StatusCode(IntEnum):
    INPUT = 10
    INPUT_SENSITIVE = 11
    SUCCESS = 20
    REDIRECT_TEMPORARY = 30
    REDIRECT_PERMANENT = 31
    TEMPORARY_FAILURE = 40
    SERVER_UNAVAILABLE = 41
    CGI_ERROR = 42
    PROXY_ERROR = 43
    SLOW_DOWN = 44
    PERMANENT_FAILURE = 50
    NOT_FOUND = 51
    GONE = 52
    PROXY_REQUEST_REFUSED = 53
    BAD_REQUEST = 54
    CLIENT_CERT_REQUIRED = 60
    CLIENT_CERT_UNAUTHORIZED = 61
    CLIENT_CERT_INVALID = 62

    @property
    def category(self) -> StatusCategory:
        return _CATEGORIES[self.value // 10]

    @property
    def is_success(self) -> bool:
        return self.category is StatusCategory.SUCCESS

    @property
    def is_redirect(self) -> bool:
        return self.category is StatusCategory.REDIRECT
