"""
Text and time helpers shared by the scorer, benchmark extractor and grader.
"""
import re
import logging
from datetime import datetime, timezone
from typing import Optional, Union


logger = logging.getLogger(__name__)


STOP_WORDS = frozenset([
    "a", "an", "and", "are", "as", "at", "be", "been", "by", "for", "from",
    "has", "he", "in", "is", "it", "its", "of", "on", "that", "the",
    "to", "was", "will", "with", "you", "your", "have", "had", "this",
    "but", "not", "or", "can", "could", "would", "should", "do", "does",
    "did", "get", "got", "go", "make", "made", "use", "used", "using",
    "each", "which", "their", "if", "up", "out", "many", "then", "them",
    "these", "so", "some", "there", "what", "all", "were", "when", "who",
    "now", "any", "my", "other", "such", "our", "much", "only", "over",
    "same", "than", "into", "more", "most", "new", "one", "also",
])

# Phrases that invite the buyer to act
CTA_PATTERN = re.compile(
    r"\b(buy|get|download|try|start|upgrade|grab|check out|contact|support|click|join)\b",
    re.IGNORECASE,
)

# Opening words that state what the product is for
UVP_PATTERN = re.compile(
    r"\b(for|build|create|template|tool|kit|system|optimi[sz]e|ready|complete)\b",
    re.IGNORECASE,
)

DOCUMENTATION_PATTERN = re.compile(
    r"\b(documentation|docs|manual|user guide|wiki|tutorials?|readme|api reference)\b",
    re.IGNORECASE,
)

UPDATE_NOTES_PATTERN = re.compile(
    r"(changelog|change log|release notes|what'?s new|version history|patch notes"
    r"|\bv?\d+\.\d+(\.\d+)?\s*[:\-])",
    re.IGNORECASE,
)

MARKUP_PATTERN = re.compile(r"<[^>]*>")
BULLET_LINE_PATTERN = re.compile(r"^\s*(?:[●○•◦▪▫‣⁃◆◇■□▸▹►▻✓✔*\-]|\d+[.)])\s+\S", re.MULTILINE)
LIST_ITEM_PATTERN = re.compile(r"<li[^>]*>", re.IGNORECASE)
HTML_BULLET_PATTERN = re.compile(r"<(?:p|div)[^>]*>\s*(?:[●○•◦▪▫‣⁃◆◇■□▸▹►▻✓✔*\-]|\d+\.)\s+", re.IGNORECASE)

# Opening window checked for a value proposition
UVP_WINDOW = 80


def strip_markup(text: Optional[str]) -> str:
    """Replace tags with spaces and collapse whitespace."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", MARKUP_PATTERN.sub(" ", text)).strip()


def word_count(text: Optional[str]) -> int:
    cleaned = strip_markup(text)
    if not cleaned:
        return 0
    return len(cleaned.split(" "))


def count_bullets(text: Optional[str]) -> int:
    """Count list items in either HTML (<li>, <p>- ...) or plain-text bullet form."""
    if not text:
        return 0
    count = len(LIST_ITEM_PATTERN.findall(text))
    count += len(HTML_BULLET_PATTERN.findall(text))
    count += len(BULLET_LINE_PATTERN.findall(text))
    return count


def tokenize(text: Optional[str], drop_stop_words: bool = True, min_length: int = 3) -> list[str]:
    """Lowercase word tokens of at least `min_length` characters, digits-only tokens removed."""
    if not text:
        return []
    tokens = re.findall(r"[a-z0-9][a-z0-9\-]*", strip_markup(text).lower())
    result = []
    for token in tokens:
        token = token.strip("-")
        if len(token) < min_length or token.isdigit():
            continue
        if drop_stop_words and token in STOP_WORDS:
            continue
        result.append(token)
    return result


def category_terms(category: Optional[str]) -> list[str]:
    """Distinct lowercase terms of a category path ('3D/Characters' -> ['3d', 'characters'])."""
    if not category:
        return []
    terms = []
    for segment in category.split("/"):
        for token in re.findall(r"[a-z0-9]+", segment.lower()):
            if token not in terms and token not in STOP_WORDS:
                terms.append(token)
    return terms


def tag_tokens(tags: list[str]) -> set[str]:
    """Whole tags plus their individual words, lowercased."""
    tokens = set()
    for tag in tags:
        lowered = tag.lower().strip()
        if not lowered:
            continue
        tokens.add(lowered)
        tokens.update(re.findall(r"[a-z0-9]+", lowered))
    return tokens


def has_cta(text: str) -> bool:
    return bool(CTA_PATTERN.search(strip_markup(text)))


def has_uvp(text: str) -> bool:
    return bool(UVP_PATTERN.search(strip_markup(text)[:UVP_WINDOW]))


def has_documentation(text: str) -> bool:
    return bool(DOCUMENTATION_PATTERN.search(text or ""))


def has_update_notes(text: str) -> bool:
    return bool(UPDATE_NOTES_PATTERN.search(strip_markup(text)))


def parse_timestamp(value: Union[datetime, str, None]) -> Optional[datetime]:
    """
    Parse an update timestamp into an aware datetime.
    Naive values are taken as UTC. Unparseable values log a warning and return None.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            for fmt in ("%b %d, %Y", "%B %d, %Y", "%d %b %Y", "%Y/%m/%d", "%m/%d/%Y"):
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
        if parsed is None:
            logger.warning(f"Unparseable update timestamp: {value!r}")
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def days_since(value: Union[datetime, str, None], now: datetime) -> Optional[int]:
    """Whole days between value and now; future dates count as 0."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return max(0, (now - parsed).days)
