class LedgerError(Exception):
    pass


class ValidationError(LedgerError):
    def __init__(self, messages):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__('; '.join(self.messages))


class AuthError(LedgerError):
    message = 'Authentication failed.'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class DuplicateEmail(AuthError):
    # Deliberately vague so registration can't be used to probe for accounts
    message = 'Could not register with those details.'


class InvalidCredentials(AuthError):
    message = 'Invalid email or password.'


class CsrfError(LedgerError):
    pass


class NotFoundError(LedgerError):
    pass
