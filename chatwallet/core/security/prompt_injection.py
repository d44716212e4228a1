"""
Prompt injection detector.

Pattern catalogue for jailbreaks, instruction overrides and fund-drain
phrasing. Critical labels block; anything else only warns.
"""

import re
from typing import FrozenSet, List, Pattern, Tuple

from .models import RiskLevel, ScreenResult


INJECTION_PATTERNS: List[Tuple[Pattern[str], str]] = [
    # Direct instruction override
    (re.compile(r"ignore\s+(all\s+)?(previous|prior|above)\s+(instructions?|rules?|prompts?)", re.I), "instruction override"),
    (re.compile(r"forget\s+(everything|all|your)\s+(you|instructions?|rules?)", re.I), "memory wipe"),
    (re.compile(r"you\s+are\s+now\s+", re.I), "persona hijack"),
    (re.compile(r"act\s+as\s+(if|though)\s+you\s+(are|were)\s+", re.I), "persona override"),
    (re.compile(r"pretend\s+(you('re|\s+are)\s+|to\s+be\s+)", re.I), "persona pretend"),
    (re.compile(r"new\s+(system\s+)?instructions?:", re.I), "system prompt injection"),
    (re.compile(r"\bsystem\s*:\s*", re.I), "system role injection"),

    # Extraction attempts
    (re.compile(r"what\s+(are|is)\s+your\s+(system|initial|original)\s+(prompt|instructions?|rules?)", re.I), "prompt extraction"),
    (re.compile(r"reveal\s+your\s+(prompt|instructions?|rules?|system)", re.I), "prompt extraction"),
    (re.compile(r"show\s+me\s+your\s+(prompt|instructions?|config)", re.I), "prompt extraction"),
    (re.compile(r"repeat\s+(the|your)\s+(system|above|initial)\s+(prompt|message|instructions?)", re.I), "prompt extraction"),

    # Fund diversion
    (re.compile(r"send\s+(all|everything|my\s+entire)\s+(balance|funds|tokens?|eth|crypto)", re.I), "fund drain attempt"),
    (re.compile(r"transfer\s+(all|everything)\s+to\s+", re.I), "fund drain attempt"),
    (re.compile(r"send\s+all\s+my\s+", re.I), "fund drain attempt"),
    (re.compile(r"drain", re.I), "drain keyword"),

    # Encoded payloads
    (re.compile(r"eval\s*\(", re.I), "code injection"),
    (re.compile(r"<script", re.I), "XSS attempt"),
    (re.compile(r"\{\{.*\}\}", re.I), "template injection"),
]

CRITICAL_LABELS: FrozenSet[str] = frozenset({
    "instruction override",
    "memory wipe",
    "persona hijack",
    "system prompt injection",
    "system role injection",
    "fund drain attempt",
    "code injection",
    "XSS attempt",
})


def screen_prompt(text: str) -> ScreenResult:
    """Screen raw user text. Pure and deterministic."""
    labels = [label for pattern, label in INJECTION_PATTERNS if pattern.search(text or "")]
    if not labels:
        return ScreenResult.ok()

    risk = RiskLevel.BLOCK if any(label in CRITICAL_LABELS for label in labels) else RiskLevel.WARNING
    return ScreenResult.from_risk(risk, [f"Prompt injection detected: {label}" for label in labels])
