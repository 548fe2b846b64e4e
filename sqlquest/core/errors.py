class ChallengeError(Exception):
    """Base class for everything the verification engine raises."""


class InvalidIdentifier(ChallengeError, ValueError):
    def __init__(self, identifier):
        self.identifier = identifier
        super().__init__(f"Invalid identifier: {identifier!r}")


class OperationRejected(ChallengeError):
    """The statement never reached the store (SELECT, unknown or not whitelisted)."""


class ExecutionError(ChallengeError):
    """The store refused the statement. The message is the driver's, verbatim."""


class ValidatorInvocationError(ChallengeError):
    """The phase validator raised instead of returning a verdict."""


class TransactionError(ChallengeError):
    """Nested begin, or a failing commit/rollback."""
