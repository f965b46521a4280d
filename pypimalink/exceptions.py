class PimalinkError(Exception):
    """Base exception"""


class PimalinkNotInitialized(PimalinkError):
    """Web user ID not bootstrapped"""


class PimalinkTransportError(PimalinkError):
    """No confirmed response from the server (DNS, connect, TLS, reset, timeout)"""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class PimalinkStateDecodeError(PimalinkError):
    """Response body is not valid JSON where JSON was required"""


class PimalinkProtocolError(PimalinkError):
    """Server answered outside the success contract with a known code or text"""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        error_code: int | None = None,
        error_text: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.error_code = error_code
        self.error_text = error_text


class PimalinkUndefinedProtocolError(PimalinkError):
    """Server answered outside the success contract without a known code"""

    def __init__(self, message: str, status: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status = status
        self.body = body


class PimalinkAuthError(PimalinkProtocolError):
    """Panel authentication refused"""


class PimalinkInvalidUserCode(PimalinkAuthError):
    """User code rejected by the panel (errorCode 45)"""


class PimalinkPanelBusy(PimalinkAuthError):
    """Panel is busy (errorCode 24)"""


class PimalinkPanelInSession(PimalinkAuthError):
    """Panel is already in a session with another client (errorCode 21)"""


class PimalinkUndefinedAuthError(PimalinkAuthError, PimalinkUndefinedProtocolError):
    """Authentication failed for a reason the panel did not specify"""

    def __init__(self, message: str, status: int | None = None, body: str | None = None):
        PimalinkAuthError.__init__(self, message, status=status)
        self.body = body
