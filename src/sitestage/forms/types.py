"""Form submission types."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

FormValues = dict[str, str | list[str]]


@dataclass(frozen=True)
class Attachment:
    """Uploaded file attached to a submission."""

    filename: str
    data: bytes
    content_type: str = "application/octet-stream"


@runtime_checkable
class FormHandler(Protocol):
    """Delivers a form submission somewhere."""

    name: str
    description: str

    async def handle(
        self,
        form_name: str,
        data: FormValues,
        attachments: Sequence[Attachment],
        config: Mapping[str, Any] | None = None,
    ) -> None: ...
