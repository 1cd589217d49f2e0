"""Slug derivation for tools and taxonomy entries."""

import re
import unicodedata


def slugify(text: str) -> str:
    """
    Convert text to a URL-friendly slug of lowercase letters, digits and hyphens.

    Accented letters are folded to ASCII; anything else is dropped. May return
    an empty string when nothing usable remains (e.g. a name in another script).
    """
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = text.lower().strip()
    text = re.sub(r"[^a-z0-9\s-]", "", text)
    text = re.sub(r"[-\s]+", "-", text)
    return text.strip("-")
