class PreconditionViolation(ValueError):
    """Raised when a caller breaks a shape or size contract.

    These are programming errors. The evaluation is aborted instead of
    returning a cost computed from inconsistent data.
    """
