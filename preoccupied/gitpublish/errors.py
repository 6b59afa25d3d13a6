"""
Exception types for the gitpublish application.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""


class ServerError(RuntimeError):
    """
    The single failure kind raised out of the publishing service.
    """


class WebhookConfigError(ValueError):
    """
    A new repository was requested without a webhook URL.
    """


class TokenError(ValueError):
    """
    A provider credential could not be resolved.
    """


def launder_exception(exc: BaseException) -> ServerError:
    """
    Convert any exception into a ServerError. A ServerError is returned
    unchanged, anything else is wrapped with the original as its cause.
    """

    if isinstance(exc, ServerError):
        return exc

    err = ServerError(str(exc) or exc.__class__.__name__)
    err.__cause__ = exc
    return err


# The end.
