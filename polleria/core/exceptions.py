"""
Order intake error taxonomy
"""


class IntakeError(Exception):
    """Base class for order intake failures"""


class InterpreterError(IntakeError):
    """The message interpreter failed (network, bad answer, not configured)"""


class NotAnOrder(InterpreterError):
    """The interpreter found no order-like content in the message"""


class PersistenceFailure(IntakeError):
    """The order header (or, in atomic mode, a line item) could not be written"""


class NotificationFailure(IntakeError):
    """An outbound WhatsApp message could not be delivered"""


class SignatureValidationFailure(IntakeError):
    """X-Hub-Signature-256 did not match the payload"""
