# recipe_box/app/routers/uploads.py
from __future__ import annotations

import mimetypes

from fastapi import Request

from recipe_box.app.infra.storage.base import normalize_extension


def extension_from(request: Request) -> str:
    """Image extension from the request's Content-Type; jpg when unknown."""
    content_type = (request.headers.get("content-type") or "").split(";", 1)[0].strip()
    guessed = mimetypes.guess_extension(content_type) if content_type else None
    if guessed in (".jpe", ".jpeg"):
        guessed = ".jpg"
    return normalize_extension((guessed or "").lstrip("."))
