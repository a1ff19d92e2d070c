import json
import logging
from datetime import date
from typing import Any, List, Optional

import httpx
from pydantic import BaseModel, ValidationError

from lunch_menus.core.config import Settings
from lunch_menus.fetch.utils import today_prague
from lunch_menus.schemas import DayMenu, Dish, WeeklyMenu

logger = logging.getLogger(__name__)


class ChatMessage(BaseModel):
    role: str = "assistant"
    content: Optional[str] = None


class ChatChoice(BaseModel):
    message: ChatMessage = ChatMessage()


class ChatCompletionEnvelope(BaseModel):
    """The part of a chat-completion response we rely on."""

    choices: List[ChatChoice] = []
    error: Optional[Any] = None

    @property
    def content(self) -> str:
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""


def build_system_prompt(today: date) -> str:
    return (
        "You extract daily lunch menus from restaurant web pages. The source text may be badly "
        "formatted (tables flattened into text, PDF or widget dumps); your job is to find the "
        "lunch menu in it anyway.\n\n"
        f"Today's date (for context): {today.strftime('%d.%m.%Y')}\n\n"
        "Rules:\n"
        "1. Look for sections like \"Polední menu\", \"Denní nabídka\", \"Menu na týden\", \"Lunch menu\".\n"
        "2. If you see dates (e.g. 22.1.) or weekday names (e.g. Pondělí), assign dishes to the right day.\n"
        "3. Ignore the permanent menu (burgers, pizzas, ...) unless it is part of the daily menu section.\n"
        "4. If the menu is in a strange format, reassemble it logically.\n"
        "5. If a dish has no price, use 0. Never leave a price field out.\n"
        "6. Only output dishes that are present in the source text. Do not invent anything.\n\n"
        "Return ONLY valid JSON in this format:\n"
        "{\n"
        "  \"poledni_nabidka\": [\n"
        "    {\n"
        "      \"den\": \"Pondělí\",\n"
        "      \"polevky\": [\"Zelňačka\"],\n"
        "      \"hlavni_chody\": [\n"
        "        {\"cislo\": 1, \"nazev\": \"Guláš s pěti\", \"popis\": \"\", "
        "\"cena_bez_polevky\": 150, \"cena_s_polevkou\": 0}\n"
        "      ]\n"
        "    }\n"
        "  ]\n"
        "}\n\n"
        "If you find no menu, return: {\"poledni_nabidka\": []}"
    )


def build_messages(source_text: str, today: date) -> list:
    return [
        {"role": "system", "content": build_system_prompt(today)},
        {"role": "user", "content": f"Content of the website/source:\n\n{source_text}"},
    ]


def strip_code_fences(content: str) -> str:
    """Remove Markdown code fences and cut the text down to the outermost JSON object."""
    content = content.replace("```json", "").replace("```", "").strip()
    start = content.find("{")
    end = content.rfind("}")
    if start != -1 and end != -1 and end > start:
        content = content[start:end + 1]
    return content


def _decode_day(raw: Any) -> Optional[DayMenu]:
    if not isinstance(raw, dict):
        return None
    raw_dishes = raw.get("hlavni_chody")
    if not isinstance(raw_dishes, list):
        raw_dishes = []
    raw_soups = raw.get("polevky")
    if not isinstance(raw_soups, list):
        raw_soups = []

    dishes = []
    for raw_dish in raw_dishes:
        try:
            dishes.append(Dish.model_validate(raw_dish))
        except ValidationError as e:
            logger.warning("Dropping invalid dish %r: %s", raw_dish, e.errors()[0]["msg"])
    try:
        return DayMenu.model_validate({
            "den": raw.get("den"),
            "polevky": raw_soups,
            "hlavni_chody": dishes,
        })
    except ValidationError as e:
        logger.warning("Dropping invalid day %r: %s", raw.get("den"), e.errors()[0]["msg"])
        return None


def parse_menu_content(content: str) -> WeeklyMenu:
    """
    Parse the model's answer into a WeeklyMenu.

    Anything unreadable means the model found no menu, so the result is an
    empty WeeklyMenu rather than an exception.
    """
    try:
        parsed = json.loads(strip_code_fences(content))
    except json.JSONDecodeError as e:
        logger.warning("Model answer is not valid JSON (%s): %s", e, content[:200])
        return WeeklyMenu(days=[])

    raw_days = parsed.get("poledni_nabidka") if isinstance(parsed, dict) else None
    if not isinstance(raw_days, list):
        logger.warning("Model answer has no poledni_nabidka list")
        return WeeklyMenu(days=[])

    days = [day for day in (_decode_day(raw) for raw in raw_days) if day is not None]
    if not days:
        logger.warning("Model found no menu in the source text")
    else:
        logger.info("Model found a menu for %d days", len(days))
    return WeeklyMenu(days=days)


async def extract_via_model(
    client: httpx.AsyncClient,
    source_text: str,
    settings: Settings,
    today: Optional[date] = None,
) -> Optional[WeeklyMenu]:
    """
    Ask the language model to turn source text into a WeeklyMenu.

    Returns None when the call itself failed (transport error, error envelope,
    unreadable envelope) and a possibly empty WeeklyMenu otherwise.
    """
    api_key = settings.require_llm_api_key()
    payload = {
        "model": settings.LLM_MODEL,
        "messages": build_messages(source_text, today or today_prague()),
        "temperature": settings.LLM_TEMPERATURE,
    }
    headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}

    logger.info("Sending %d chars to %s", len(source_text), settings.LLM_MODEL)
    try:
        response = await client.post(
            settings.LLM_API_URL, json=payload, headers=headers, timeout=settings.REQUEST_TIMEOUT
        )
    except httpx.HTTPError as e:
        logger.error("Language model request failed: %s", e)
        return None

    try:
        envelope = ChatCompletionEnvelope.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        logger.error("Unreadable language model response (HTTP %s): %s", response.status_code, e)
        return None

    if envelope.error:
        logger.error("Language model API error: %s", envelope.error)
        return None
    if not response.is_success:
        logger.error("Language model API returned HTTP %s", response.status_code)
        return None

    return parse_menu_content(envelope.content)
