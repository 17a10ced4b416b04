from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Dict

from google.genai import types  # type: ignore

from ..core.config import settings
from ..schemas.catalog import CatalogEntry
from ..utils.errors import ExtractionFailed, ExtractionTimeout, ExtractionUnavailable
from .catalog_normalizer import normalize_extraction
from .genai_client import get_genai_client

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = frozenset({"application/pdf", "image/jpeg", "image/png", "image/webp"})

EXTRACTION_PROMPT = (
    "You read HVAC equipment technical sheets and price lists.\n"
    "Extract the product into JSON with exactly this shape:\n"
    '{"brand": "", "model": "", "type": "air_conditioner|boiler|electric_water_heater", "stock": 0,\n'
    ' "description": {"es": "", "ca": ""},\n'
    ' "pricing": [{"name": {"es": "", "ca": ""}, "price": 0}],\n'
    ' "installation_kits": [{"name": "", "price": 0}],\n'
    ' "extras": [{"name": "", "qty": 1, "unit_price": 0}],\n'
    ' "financing": [{"months": 12, "coefficient": 0}],\n'
    ' "techSpecs": [{"title": "", "value": ""}]}\n'
    "Rules:\n"
    "- Prices are euros, VAT included, as plain numbers.\n"
    "- One pricing entry per power/size variant of the model.\n"
    "- Write descriptions in Spanish (es) and Catalan (ca).\n"
    "- Use empty lists when a section is not present in the document.\n"
    "- Respond with JSON only, no prose.\n"
)


def _parse_json_object(text: str) -> Dict[str, Any]:
    text = (text or "").strip()
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        text = text[start : end + 1]
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("extraction response is not a JSON object")
    return data


async def extract_catalog_entry(content: bytes, mime_type: str) -> CatalogEntry:
    """Ask Gemini for the product in ``content`` and return a normalized draft.

    No retry here; callers decide whether to try again after a timeout.
    """
    client = get_genai_client()
    if client is None:
        raise ExtractionUnavailable("Document extraction is not configured")

    timeout = float(settings.AI_EXTRACTION_TIMEOUT_SECONDS)
    t0 = time.monotonic()
    try:
        res = await asyncio.wait_for(
            client.aio.models.generate_content(
                model=settings.GENAI_MODEL,
                contents=[
                    types.Part.from_bytes(data=content, mime_type=mime_type),
                    EXTRACTION_PROMPT,
                ],
                config=types.GenerateContentConfig(response_mime_type="application/json"),
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError as exc:
        logger.warning("catalog_extraction: gemini timed out after %.1fs", timeout)
        raise ExtractionTimeout(f"Extraction did not finish within {timeout:g}s") from exc
    except Exception as exc:
        logger.warning("catalog_extraction: gemini call failed: %s", exc)
        raise ExtractionFailed("Extraction service error") from exc

    logger.info("catalog_extraction: gemini_ms=%s", int((time.monotonic() - t0) * 1000))
    try:
        raw = _parse_json_object(getattr(res, "text", None) or "")
    except ValueError as exc:
        # json.JSONDecodeError is a ValueError
        logger.warning("catalog_extraction: unparseable response: %s", exc)
        raise ExtractionFailed("Extraction returned an unreadable payload") from exc
    return normalize_extraction(raw)
