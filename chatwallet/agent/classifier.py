"""
Intent classification.

The Anthropic classifier asks Claude for a single JSON object. Without an
API key the local regex parser is used instead. Either way a failure
yields `unknown` with confidence 0 rather than an exception.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Pattern, Tuple

from anthropic import AsyncAnthropic

from ..config import Settings
from .models import ActionIntent, ParsedAction


logger = logging.getLogger(__name__)

CLASSIFIER_PROMPT = """You turn chat messages for a crypto wallet on Base into one JSON object.

Reply with JSON only, no prose, in this shape:
{"intent": "<intent>", "params": {...}, "confidence": <0..1>}

Intents and params:
- swap: fromToken, toToken, amount
- bridge: token, amount, fromChain, toChain
- send: token, amount, toAddress
- price: token
- balance: (none)
- deposit: (none). Also "show my wallet", "wallet address"
- export_key: (none). Includes confirmations like "yes, export my key"
- history: limit
- verify_project: link
- help: topic
- unknown: (none)

Keep token symbols and addresses exactly as written. Amounts are strings."""

JSON_OBJECT_RE = re.compile(r"\{.*\}", re.S)


class IntentClassifier(ABC):
    @abstractmethod
    async def classify(self, message: str, context: Optional[List[Dict[str, str]]] = None) -> ParsedAction:
        """Map a message onto a ParsedAction."""


def parse_classifier_reply(text: str, raw_text: str) -> ParsedAction:
    match = JSON_OBJECT_RE.search(text or "")
    if not match:
        raise ValueError("classifier reply contained no JSON object")
    payload = json.loads(match.group(0))
    if not isinstance(payload, dict):
        raise ValueError("classifier reply was not an object")

    intent = str(payload.get("intent") or ActionIntent.UNKNOWN.value).lower()
    if intent not in {item.value for item in ActionIntent}:
        intent = ActionIntent.UNKNOWN.value
    params = payload.get("params") if isinstance(payload.get("params"), dict) else {}
    try:
        confidence = min(max(float(payload.get("confidence", 0.0)), 0.0), 1.0)
    except (TypeError, ValueError):
        confidence = 0.0
    return ParsedAction(intent=intent, params=params, confidence=confidence, raw_text=raw_text)


class AnthropicIntentClassifier(IntentClassifier):
    """Claude-backed classifier."""

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        max_tokens: int = 256,
        client: Optional[AsyncAnthropic] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.client = client or AsyncAnthropic(api_key=api_key)

    async def classify(self, message: str, context: Optional[List[Dict[str, str]]] = None) -> ParsedAction:
        messages = [
            {"role": turn["role"], "content": turn["content"]}
            for turn in (context or [])
            if turn.get("role") in ("user", "assistant") and turn.get("content")
        ]
        messages.append({"role": "user", "content": message})

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=CLASSIFIER_PROMPT,
                messages=messages,
            )
            text = "".join(
                getattr(block, "text", "") for block in response.content if getattr(block, "type", "") == "text"
            )
            return parse_classifier_reply(text, message)
        except Exception as e:
            logger.warning(f"Intent classification failed: {e}")
            return ParsedAction.unknown(message)


ParamExtractor = Callable[[re.Match, str], Dict[str, Any]]


def _swap(m: re.Match, raw: str) -> Dict[str, Any]:
    return {"fromToken": m.group(2).upper(), "toToken": m.group(3).upper(), "amount": m.group(1), "chain": "base"}


def _bridge(m: re.Match, raw: str) -> Dict[str, Any]:
    return {
        "token": m.group(2).upper(),
        "amount": m.group(1),
        "fromChain": m.group(3).lower(),
        "toChain": m.group(4).lower(),
    }


def _send(m: re.Match, raw: str) -> Dict[str, Any]:
    return {"token": m.group(2).upper(), "amount": m.group(1), "toAddress": m.group(3), "chain": "base"}


def _history(m: re.Match, raw: str) -> Dict[str, Any]:
    limit = re.search(r"\b(\d{1,2})\b", raw)
    return {"limit": int(limit.group(1))} if limit else {}


LOCAL_PATTERNS: List[Tuple[str, List[Pattern[str]], ParamExtractor]] = [
    ("swap", [
        re.compile(r"swap\s+([\d.]+)\s*(\w+)\s*(?:to|for|into|→)\s*(\w+)", re.I),
        re.compile(r"exchange\s+([\d.]+)\s*(\w+)\s*(?:to|for|into)\s*(\w+)", re.I),
        re.compile(r"convert\s+([\d.]+)\s*(\w+)\s*(?:to|for|into)\s*(\w+)", re.I),
    ], _swap),
    ("bridge", [
        re.compile(r"bridge\s+([\d.]+)\s*(\w+)\s*(?:from)?\s*(\w+)\s*(?:to|→)\s*(\w+)", re.I),
    ], _bridge),
    ("send", [
        re.compile(r"send\s+([\d.]+)\s*(\w+)\s*to\s*(0x[a-fA-F0-9]+)", re.I),
        re.compile(r"transfer\s+([\d.]+)\s*(\w+)\s*to\s*(0x[a-fA-F0-9]+)", re.I),
    ], _send),
    ("export_key", [
        re.compile(r"export\s+(?:my\s+)?(?:private\s+)?key", re.I),
        re.compile(r"yes,?\s+export", re.I),
    ], lambda m, raw: {}),
    ("deposit", [
        re.compile(r"(?:show|get|create)\s+(?:me\s+)?(?:my\s+)?wallet", re.I),
        re.compile(r"deposit|fund\s+(?:my\s+)?wallet|wallet\s+address", re.I),
    ], lambda m, raw: {}),
    ("history", [
        re.compile(r"(?:transaction\s+)?history|recent\s+transactions|my\s+transactions", re.I),
    ], _history),
    ("price", [
        re.compile(r"(?:price of|how much is|what(?:'s| is) the price of|price)\s+(\w+)", re.I),
        re.compile(r"^(\w{2,10})\s+price$", re.I),
    ], lambda m, raw: {"token": m.group(1).upper()}),
    ("balance", [
        re.compile(r"balance", re.I),
        re.compile(r"(?:how much|what(?:'s| do i have))\s+(?:in my wallet|do i have)", re.I),
    ], lambda m, raw: {"chain": "base"}),
    ("verify_project", [
        re.compile(r"verify\s+(https?://\S+)", re.I),
        re.compile(r"verify\s+([a-zA-Z0-9_.-]+(?:/[a-zA-Z0-9_.-]+)+)", re.I),
        re.compile(r"verify\s+(@[a-zA-Z0-9_]+)", re.I),
        re.compile(r"verify\s+([a-zA-Z0-9][-a-zA-Z0-9]*\.[a-zA-Z]{2,})", re.I),
    ], lambda m, raw: {"link": m.group(1).strip()}),
    ("help", [
        re.compile(r"^(?:help|hi|hello|hey|gm|what can you do|how does this work|explain)", re.I),
        re.compile(r"^(?:how to|getting started)", re.I),
    ], lambda m, raw: {"topic": raw}),
]


class LocalIntentClassifier(IntentClassifier):
    """Regex fallback used when no Anthropic key is configured."""

    async def classify(self, message: str, context: Optional[List[Dict[str, str]]] = None) -> ParsedAction:
        text = (message or "").strip()
        for intent, patterns, extract in LOCAL_PATTERNS:
            for pattern in patterns:
                match = pattern.search(text)
                if match:
                    return ParsedAction(intent=intent, params=extract(match, text), confidence=0.8, raw_text=message)

        return ParsedAction(
            intent=ActionIntent.HELP.value,
            params={"topic": message},
            confidence=0.3,
            raw_text=message,
        )


def build_classifier(settings: Settings) -> IntentClassifier:
    if settings.has_anthropic_key:
        return AnthropicIntentClassifier(
            settings.anthropic_api_key,
            settings.llm_model,
            max_tokens=settings.classifier_max_tokens,
        )
    logger.info("No ANTHROPIC_API_KEY configured; using the local intent parser")
    return LocalIntentClassifier()
