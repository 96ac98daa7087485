"""Translation of user facing strings.

Catalogues are looked up in `locale/<lang>/LC_MESSAGES/scratchpad.mo` next
to this module. Strings without a translation are returned unchanged.
"""

import functools
import gettext
import re
from pathlib import Path

from aiohttp import web

DOMAIN = "scratchpad"
LOCALE_DIR = Path(__file__).parent / "locale"

# BCP 47 style tag, e.g. "de" or "zh-Hant-TW".
_LANGUAGE_TAG_RE = re.compile(r"[A-Za-z]{1,8}(-[A-Za-z0-9]{1,8})*")


@functools.lru_cache(maxsize=32)
def get_translations(language: str) -> gettext.NullTranslations:
    return gettext.translation(
        DOMAIN, localedir=LOCALE_DIR, languages=[language], fallback=True
    )


def negotiate_language(request: web.Request, default: str) -> str:
    """Pick the language the client prefers most from `Accept-Language`.

    Tags that are not well formed are ignored, so the result is always safe
    to use as a catalogue directory name.
    """
    header = request.headers.get("Accept-Language", "")
    best = None
    best_quality = 0.0
    for part in header.split(","):
        tag, _, params = part.strip().partition(";")
        tag = tag.strip()
        if not _LANGUAGE_TAG_RE.fullmatch(tag):
            continue
        quality = 1.0
        if params.strip().startswith("q="):
            try:
                quality = float(params.strip()[2:])
            except ValueError:
                continue
        if quality > best_quality:
            best, best_quality = tag, quality
    if best is None:
        return default
    return best.replace("-", "_")


def localize(request: web.Request, message: str, *args: object) -> str:
    """Translate `message` for the request and interpolate `args` with `%`."""
    default = request.app["config"].language
    translations = get_translations(negotiate_language(request, default))
    text = translations.gettext(message)
    if args:
        return text % args
    return text
