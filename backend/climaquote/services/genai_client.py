from __future__ import annotations

from typing import Optional

from google import genai  # type: ignore
from google.genai import types  # type: ignore

from ..core.config import settings

_GENAI_CLIENT: Optional[genai.Client] = None


def get_genai_client() -> Optional[genai.Client]:
    """Return the process-wide Gemini client, or None when no key is configured.

    The HTTP timeout matches the extraction deadline so a stuck request is cut
    at the transport as well as by the caller's ``wait_for``.
    """
    global _GENAI_CLIENT
    api_key = (getattr(settings, "GOOGLE_GENAI_API_KEY", "") or "").strip()
    if not api_key:
        return None
    if _GENAI_CLIENT is None:
        _GENAI_CLIENT = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(
                client_args={"timeout": float(settings.AI_EXTRACTION_TIMEOUT_SECONDS)},
            ),
        )
    return _GENAI_CLIENT

