"""
Task helpers backed by the completion API: parse free text into task fields,
rewrite a task, and suggest a category/priority.

Replies are sanitized, decoded and checked against the expected shape.
Anything else raises MalformedCompletion; nothing is retried.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Optional, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from errors import MalformedCompletion
from models import ImprovedTask, ParsedTask, TaskClassification
from prompts import CLASSIFY_PROMPT, IMPROVE_PROMPT, PARSE_PROMPT
from sanitizer import sanitize

logger = logging.getLogger(__name__)

ReplyT = TypeVar("ReplyT", bound=BaseModel)


class Completer(Protocol):
    async def complete(self, prompt: str) -> str: ...


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def today_utc() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def decode_reply(raw: str, model: type[ReplyT]) -> ReplyT:
    """Sanitize a completion reply and validate it against `model`."""
    cleaned = sanitize(raw)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("completion event=rejected reason=not_json reply=%r", cleaned[:200])
        raise MalformedCompletion("Bad AI response: not valid JSON") from e

    if not isinstance(parsed, dict):
        logger.warning("completion event=rejected reason=not_object reply=%r", cleaned[:200])
        raise MalformedCompletion("Bad AI response: expected a JSON object")

    try:
        return model.model_validate(parsed)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        logger.warning("completion event=rejected reason=shape fields=%s", fields)
        raise MalformedCompletion(f"Bad AI response: missing or invalid {fields}") from e


async def parse_task(client: Completer, text: str, current_date: Optional[str] = None) -> ParsedTask:
    prompt = PARSE_PROMPT.format(
        current_date=_quote(current_date or today_utc()),
        text=_quote(text),
    )
    return decode_reply(await client.complete(prompt), ParsedTask)


async def improve_task(client: Completer, title: str, description: str) -> ImprovedTask:
    prompt = IMPROVE_PROMPT.format(title=_quote(title), description=_quote(description))
    return decode_reply(await client.complete(prompt), ImprovedTask)


async def classify_task(client: Completer, title: str, description: str) -> TaskClassification:
    prompt = CLASSIFY_PROMPT.format(title=_quote(title), description=_quote(description))
    return decode_reply(await client.complete(prompt), TaskClassification)
