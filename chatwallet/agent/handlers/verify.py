"""
Project verification handler.

Only the chat side: recognise the link the user pasted and explain how to
prove ownership. The OAuth and attestation flows live outside this service.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import quote

from ..models import ActionResult, VerifyParams
from .base import ActionContext


GITHUB_URL_RE = re.compile(r"^(?:https?://)?(?:www\.)?github\.com/([a-zA-Z0-9_.-]+)/([a-zA-Z0-9_.-]+)/?", re.I)
BARE_REPO_RE = re.compile(r"^([a-zA-Z0-9_.-]+)/([a-zA-Z0-9_.-]+)$")
INSTAGRAM_URL_RE = re.compile(r"^(?:https?://)?(?:www\.)?instagram\.com/([a-zA-Z0-9_.]+)/?", re.I)
TWITTER_URL_RE = re.compile(r"^(?:https?://)?(?:www\.)?(?:twitter\.com|x\.com)/([a-zA-Z0-9_]+)/?", re.I)
HANDLE_RE = re.compile(r"^@([a-zA-Z0-9_.-]+)$")
DOMAIN_RE = re.compile(
    r"^(?:https?://)?(?:www\.)?([a-zA-Z0-9][-a-zA-Z0-9]*\.[a-zA-Z]{2,}(?:\.[a-zA-Z]{2,})?)/?",
    re.I,
)
DOMAIN_LIKE_REPO_RE = re.compile(r"\.(com|org|io|dev|app|net|co|xyz)$", re.I)
SOCIAL_DOMAINS = ("github.com", "instagram.com", "twitter.com", "x.com")

BEST_METHOD = {
    "github": "github_oauth",
    "instagram": "instagram_graph",
    "twitter": "tweet_zktls",
    "domain": "domain_dns",
}


@dataclass(frozen=True)
class ParsedLink:
    platform: str
    project_id: str
    display_url: str
    verify_methods: List[str] = field(default_factory=list)


def _github(owner: str, repo: str) -> ParsedLink:
    repo = re.sub(r"\.git$", "", repo)
    return ParsedLink("github", f"{owner}/{repo}", f"https://github.com/{owner}/{repo}", ["github_oauth", "github_file"])


def _twitter(handle: str) -> ParsedLink:
    handle = handle.lower()
    return ParsedLink("twitter", handle, f"https://x.com/{handle}", ["tweet_zktls"])


def parse_link(raw: str) -> Optional[ParsedLink]:
    """Normalise a URL, handle or bare `org/repo` into a project identity."""
    text = (raw or "").strip()
    if not text:
        return None

    match = GITHUB_URL_RE.match(text)
    if match:
        return _github(match.group(1), match.group(2))

    match = INSTAGRAM_URL_RE.match(text)
    if match:
        username = match.group(1).lower()
        return ParsedLink("instagram", username, f"https://instagram.com/{username}", ["instagram_graph"])

    match = TWITTER_URL_RE.match(text) or HANDLE_RE.match(text)
    if match:
        return _twitter(match.group(1))

    match = BARE_REPO_RE.match(text)
    if match and not DOMAIN_LIKE_REPO_RE.search(match.group(2)):
        return _github(match.group(1), match.group(2))

    match = DOMAIN_RE.match(text)
    if match:
        domain = match.group(1).lower()
        if domain.startswith(SOCIAL_DOMAINS):
            return None
        return ParsedLink("domain", domain, f"https://{domain}", ["domain_dns", "domain_file", "domain_meta"])

    return None


def _instructions(link: ParsedLink) -> str:
    if link.platform == "github":
        lines = [
            f"🔗 **GitHub Repo Detected:** [{link.project_id}]({link.display_url})",
            "",
            "**Two ways to verify:**",
            "",
            "**1. GitHub OAuth (recommended)**: instant verification",
            "   Connect your GitHub account and we'll check you have admin access.",
            "",
            "**2. File-based**: no OAuth needed",
            "   Add a `.well-known/pool-claim.txt` file to your repo with your verification code.",
        ]
    elif link.platform == "instagram":
        lines = [
            f"📸 **Instagram Account Detected:** [@{link.project_id}]({link.display_url})",
            "",
            "Connect your Instagram Business/Creator account to verify ownership.",
        ]
    elif link.platform == "twitter":
        lines = [
            f"🐦 **Twitter/X Account Detected:** [@{link.project_id}]({link.display_url})",
            "",
            "Tweet a verification code and we'll check it.",
        ]
    else:
        lines = [
            f"🌐 **Website Detected:** [{link.project_id}]({link.display_url})",
            "",
            "**Verify with one of:**",
            "**1. DNS TXT Record** on your domain",
            "**2. Well-Known File** at `.well-known/pool-claim.txt`",
            "**3. HTML Meta Tag** on your homepage",
        ]
    lines.extend(["", "Provide your wallet address to generate a verification challenge."])
    return "\n".join(lines)


async def verify_project_handler(params: VerifyParams, ctx: ActionContext) -> ActionResult:
    raw_link = params.link or params.project_id
    if not raw_link:
        return ActionResult(
            success=True,
            message="\n".join([
                "I can verify your project ownership. Just provide a link:",
                "",
                "• **GitHub**: `https://github.com/org/repo` or just `org/repo`",
                "• **Instagram**: `https://instagram.com/handle`",
                "• **Twitter/X**: `https://x.com/handle` or `@handle`",
                "• **Website**: `https://myproject.dev`",
                "",
                'Say something like: "verify https://github.com/my-org/my-project"',
            ]),
            data={"status": "needs_link"},
        )

    link = parse_link(raw_link)
    if link is None:
        return ActionResult(
            success=False,
            message=(
                f'I couldn\'t recognize "{raw_link}" as a supported link. '
                "Try a full URL like `https://github.com/org/repo` or `https://instagram.com/handle`."
            ),
        )

    method = BEST_METHOD[link.platform]
    return ActionResult(
        success=True,
        message=_instructions(link),
        data={
            "platform": link.platform,
            "projectId": link.project_id,
            "displayUrl": link.display_url,
            "method": method,
            "verifyMethods": link.verify_methods,
            "redirectUrl": f"/verify?method={method}&project={quote(link.project_id, safe='')}",
            "status": "ready_to_verify",
        },
    )
