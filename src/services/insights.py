# optional text generation: product copy and schedule summaries, in Spanish
from __future__ import annotations

import json
from typing import Iterable, Optional

from google import genai

from store.models import Appointment
from utils.config import get_settings
from utils.logger import get_logger

_logger = get_logger(__name__)

DESCRIPTION_NOT_CONFIGURED = "Servicio de IA no configurado (Falta API Key)."
DESCRIPTION_EMPTY = "No se pudo generar la descripción."
DESCRIPTION_FAILED = "Error al conectar con el servicio de IA."

SUMMARY_NOT_CONFIGURED = ""
SUMMARY_EMPTY = "No hay información disponible."
SUMMARY_FAILED = "Servicio de IA no disponible momentáneamente."

DESCRIPTION_PROMPT = """
Actúa como un redactor experto en comercio electrónico.
Escribe una descripción de producto atractiva, breve y optimizada para ventas (máximo 60 palabras) en ESPAÑOL.

Nombre del Producto: {name}
Categoría: {category}
Contexto o notas adicionales: {context}

Respuesta (SOLO el texto de la descripción, sin títulos):
"""

SUMMARY_PROMPT = """
Analiza la siguiente lista de citas y proporciona un breve resumen ejecutivo (2 oraciones) en ESPAÑOL sobre la carga de trabajo y prioridades.
Usa un tono profesional y motivador.

Datos: {data}
"""

_client: Optional[genai.Client] = None


def _get_client() -> Optional[genai.Client]:
    """Shared Gemini client, or None while no API key is configured."""
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.genai_configured:
            return None
        _client = genai.Client(api_key=settings.genai_api_key)
    return _client


async def _generate(prompt: str) -> Optional[str]:
    """Text of the model's answer (possibly empty). Raises on service failures."""
    client = _get_client()
    response = await client.aio.models.generate_content(
        model=get_settings().genai_model,
        contents=prompt,
    )
    return (response.text or "").strip()


async def generate_product_description(
    name: str, category: str, context: str = ""
) -> str:
    """Short sales description for a product; a fixed fallback text when unavailable."""
    if _get_client() is None:
        return DESCRIPTION_NOT_CONFIGURED
    prompt = DESCRIPTION_PROMPT.format(name=name, category=category, context=context)
    try:
        text = await _generate(prompt)
    except Exception as e:
        # transport depends on the installed backend (httpx or aiohttp)
        _logger.error(f"Gemini API error: {e!r}")
        return DESCRIPTION_FAILED
    return text or DESCRIPTION_EMPTY


def schedule_digest(appointments: Iterable[Appointment]) -> str:
    """The (date, service, status) facts sent for a schedule summary, as JSON."""
    return json.dumps(
        [
            {"date": a.date.isoformat(), "service": a.service, "status": a.status}
            for a in appointments
        ],
        ensure_ascii=False,
    )


async def analyze_schedule(appointments: Iterable[Appointment]) -> str:
    """Two-sentence summary of the workload; "" when the service is not configured."""
    if _get_client() is None:
        return SUMMARY_NOT_CONFIGURED
    prompt = SUMMARY_PROMPT.format(data=schedule_digest(appointments))
    try:
        text = await _generate(prompt)
    except Exception as e:
        # transport depends on the installed backend (httpx or aiohttp)
        _logger.error(f"Gemini API error: {e!r}")
        return SUMMARY_FAILED
    return text or SUMMARY_EMPTY
