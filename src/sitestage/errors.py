"""Exceptions raised by the form-delivery pipeline."""


class MailgunError(Exception):
    """Mailgun API request failed."""


class FormHandlerError(Exception):
    """A form handler could not deliver a submission."""


class FormProcessingError(Exception):
    """Every form handler that ran for a submission failed."""
