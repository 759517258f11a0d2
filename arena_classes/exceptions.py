"""Contains all custom `Exceptions`"""


class ArenaError(Exception):
    """Base exception for everything raised by the Arena client"""

    pass


class NoActiveSearch(ArenaError):
    """The exception for when a page is requested before any search was run"""

    pass


class AuthenticationFailed(ArenaError):
    """The exception for when the portal rejects the supplied credentials.

    The message is the text of the portal's feedback panel.
    """

    pass


class MalformedMarkup(ArenaError):
    """The exception for when an element the portal always renders is missing"""

    pass
