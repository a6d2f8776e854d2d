"""Form submission API endpoint.

Parses multipart or urlencoded submissions and hands them to the form
processor.
"""

import asyncio
import logging

from aiohttp import web

from sitestage.app_keys import form_processor_key
from sitestage.forms.types import Attachment, FormValues

logger = logging.getLogger(__name__)

FORM_NAME_FIELD = "form-name"
IGNORED_FIELDS = frozenset({FORM_NAME_FIELD, "disclaimer", "bot-field"})


def create_forms_routes() -> list[web.RouteDef]:
    return [web.post("/api/submit-form", submit_form)]


async def submit_form(request: web.Request) -> web.Response:
    processor = request.app[form_processor_key]

    try:
        form_data = await request.post()

        form_name = form_data.get(FORM_NAME_FIELD)
        if not form_name or not isinstance(form_name, str):
            return web.json_response({"error": "Form name is required"}, status=400)

        values: FormValues = {}
        attachments: list[Attachment] = []

        for key, value in form_data.items():
            if key in IGNORED_FIELDS:
                continue

            # Fields are namespaced by form name in the rendered markup
            field_name = key.removeprefix(f"{form_name}-")

            if isinstance(value, web.FileField):
                attachments.append(
                    Attachment(
                        filename=value.filename,
                        data=await asyncio.to_thread(value.file.read),
                        content_type=value.content_type or "application/octet-stream",
                    ),
                )
                values[field_name] = f"Attached file: {value.filename}"
                continue

            text = value if isinstance(value, str) else bytes(value).decode("utf-8")
            existing = values.get(field_name)
            if existing is None:
                values[field_name] = text
            elif isinstance(existing, list):
                existing.append(text)
            else:
                values[field_name] = [existing, text]

        await processor.process(form_name, values, attachments)
    except web.HTTPException:
        raise
    except Exception as e:
        logger.exception("Form submission failed")
        return web.json_response(
            {"error": str(e) or "Internal server error"},
            status=500,
        )

    return web.json_response({"success": True})
