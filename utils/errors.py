"""
Typed failures raised by the services layer

Routes never build error payloads by hand: the app-level handler in
``main.py`` turns any ``BingoError`` into ``{"ok": false, "error": ...}``
with the matching status code.
"""


class BingoError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BingoError):
    """Bad input from the caller ("fix your input")"""
    status_code = 400


class NotFoundError(BingoError):
    """Unknown venue, event or code ("check your link/QR code")"""
    status_code = 404


class StoreError(BingoError):
    """The database refused or failed a read/write"""
    status_code = 500
