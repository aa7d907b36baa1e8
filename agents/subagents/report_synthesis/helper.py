import json
import logging
import re

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```json\n([\s\S]*?)\n```")
_FENCED_ANY = re.compile(r"```\n([\s\S]*?)\n```")


def parse_gemini_json(text: str) -> dict:
    """Pulls a JSON object out of model output that may be fenced or wrapped in prose.

    Returns {} when nothing parseable is found.
    """
    if not isinstance(text, str) or not text:
        return {}
    match = _FENCED_JSON.search(text) or _FENCED_ANY.search(text)
    json_str = match.group(1) if match else text
    json_str = json_str.replace("```json", "").replace("```", "").strip()
    if json_str.startswith("json"):
        json_str = json_str[4:]

    first = json_str.find("{")
    last = json_str.rfind("}")
    if first == -1 or last == -1 or last < first:
        return {}
    try:
        parsed = json.loads(json_str[first:last + 1])
    except json.JSONDecodeError as e:
        logger.warning(f"JSON parse warning: {e}")
        return {}
    return parsed if isinstance(parsed, dict) else {}


def format_brl(value: float, decimals: int = 0) -> str:
    """1234567.8 -> '1.234.568' (pt-BR grouping)."""
    text = f"{value:,.{decimals}f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")
