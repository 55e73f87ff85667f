"""Turn search box input into a character NodeId."""

import logging
import re
from urllib.parse import unquote

from keygraph.models import NodeId

logger = logging.getLogger(__name__)

RIO_LINK = re.compile(
    r"^(?:https?://)?raider\.io/characters/(eu|us|kr|tw|cn)/([^/]+)/([^/?#]+)",
    re.IGNORECASE,
)

RUN_URL = "https://raider.io/mythic-plus-runs/{season}/{run}"

# Dataset season name -> raider.io season slug
SEASON_SLUGS = {
    "tww-season2": "season-tww-2",
    "tww-season3": "season-tww-3",
}


def _capitalize_name(name: str) -> str:
    return name[:1].upper() + name[1:].lower()


def realm_from_slug(slug: str) -> str:
    """Best guess at a realm name when the slug is not in the mapping."""
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def parse_character_input(text: str, slug_mapping: dict[str, str] | None = None) -> NodeId | None:
    """Accept a raider.io character link or a plain Name-Realm string.

    Links are rewritten to Name-Realm using the realm slug mapping. Anything
    else is returned trimmed. Blank input gives None.
    """
    stripped = text.strip()
    if not stripped:
        return None

    match = RIO_LINK.match(stripped)
    if match is None or slug_mapping is None:
        return stripped

    slug = unquote(match.group(2)).lower()
    name = _capitalize_name(unquote(match.group(3)))

    realm = slug_mapping.get(slug)
    if realm is None:
        realm = realm_from_slug(slug)
        logger.warning('Realm slug "%s" not found in mapping, using "%s"', slug, realm)

    return f"{name}-{realm}"


def run_url(label: str, season: str) -> str:
    """raider.io page for a run label such as "Ara-Kara #123456"."""
    run = label.rsplit("#", 1)[-1].strip()
    return RUN_URL.format(season=SEASON_SLUGS.get(season, season), run=run)
