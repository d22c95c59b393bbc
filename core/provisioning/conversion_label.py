import json
import re
from typing import Any, Iterable, Optional

import structlog

logger = structlog.get_logger(__name__)

SNIPPET_PREVIEW_CHARS = 200

# 'send_to': 'AW-123/Label' with the key quoted, spacing around ':' optional.
# Fallback: the key is bare (send_to: "AW-123/Label").
LABEL_PATTERNS = (
    re.compile(r"""['"]send_to['"]\s*:\s*['"]AW-\d+/([^'"]+)['"]""", re.IGNORECASE),
    re.compile(r"""send_to\s*:\s*['"]AW-\d+/([^'"]+)['"]""", re.IGNORECASE),
)


def extract_label(snippet_text: str) -> Optional[str]:
    """Return the conversion label from a gtag event snippet, or None."""
    if not snippet_text or not isinstance(snippet_text, str):
        logger.warning("Conversion snippet is empty or not text", type=type(snippet_text).__name__)
        return None

    for pattern in LABEL_PATTERNS:
        match = pattern.search(snippet_text)
        if match and match.group(1):
            return match.group(1)

    logger.warning(
        "Could not extract conversion label",
        snippet=snippet_text[:SNIPPET_PREVIEW_CHARS],
    )
    return None


def extract_label_from_snippets(snippets: Iterable[Any], action_name: str = "") -> str:
    """First label found across a conversion action's tag snippets, else ''."""
    for snippet in snippets or []:
        label = extract_label(_snippet_text(snippet))
        if label:
            return label

    logger.warning("No conversion label found", action=action_name)
    return ""


def _snippet_text(snippet: Any) -> str:
    if isinstance(snippet, str):
        return snippet
    if isinstance(snippet, dict):
        text = (
            snippet.get("eventSnippet")
            or snippet.get("event_snippet")
            or snippet.get("globalSiteTag")
            or snippet.get("global_site_tag")
        )
        if text:
            return text
    return json.dumps(snippet, default=str)
