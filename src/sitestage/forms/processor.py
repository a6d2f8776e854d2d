"""Form submission processing.

Runs every configured handler for a submission and decides whether the
submission as a whole succeeded.
"""

import logging
from collections.abc import Sequence

from sitestage.config import FormHandlersConfig, FormSpec
from sitestage.errors import FormProcessingError
from sitestage.forms.registry import FormHandlerRegistry
from sitestage.forms.types import Attachment, FormValues

logger = logging.getLogger(__name__)


class FormProcessor:
    """Dispatches form submissions to the configured handlers."""

    def __init__(
        self,
        handlers_config: FormHandlersConfig,
        forms: dict[str, FormSpec],
        registry: FormHandlerRegistry,
    ) -> None:
        """Initialize processor.

        Args:
            handlers_config: Handler order, enablement and options
            forms: Form definitions keyed by form name
            registry: Available handlers
        """
        self.handlers_config = handlers_config
        self.forms = forms
        self.registry = registry

    async def process(
        self,
        form_name: str,
        values: FormValues,
        attachments: Sequence[Attachment] = (),
    ) -> int:
        """Deliver a submission through every enabled default handler.

        A handler failure does not stop the remaining handlers. The
        submission only fails when handlers ran and every one of them failed.

        Args:
            form_name: Name of the submitted form
            values: Submitted field values
            attachments: Uploaded files

        Returns:
            Number of handlers that completed

        Raises:
            FormProcessingError: If all handlers that ran failed
        """
        form = self.forms.get(form_name)
        recipients = list(form.recipients) if form is not None else []

        errors: list[str] = []
        success_count = 0

        for handler_name in self.handlers_config.defaults:
            handler = self.registry.get(handler_name)
            if handler is None:
                logger.warning(
                    f"FormProcessor: Handler '{handler_name}' not found in registry.",
                )
                continue

            handler_config = self.handlers_config.get_handler_config(handler_name)
            if not handler_config.enabled:
                logger.debug(f"FormProcessor: Handler '{handler_name}' is disabled")
                continue

            execution_config = {**handler_config.options, "recipients": recipients}

            try:
                await handler.handle(form_name, values, attachments, execution_config)
            except Exception as e:
                logger.error(f"FormProcessor: Handler '{handler_name}' failed: {e}")
                errors.append(f"{handler_name}: {e}")
            else:
                success_count += 1

        if success_count == 0 and errors:
            raise FormProcessingError(f"Form processing failed: {'; '.join(errors)}")

        if success_count == 0:
            logger.warning(
                f"FormProcessor: No handlers executed for form '{form_name}'. "
                "Check form_handlers.defaults.",
            )

        return success_count
