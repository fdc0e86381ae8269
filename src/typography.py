"""French typography applied to rendered HTML.

The rules run over the whole document, markup included, in a fixed order.
"""

import re

NBSP = "&nbsp;"

_SPACE_BEFORE_PUNCTUATION = re.compile(r" ([!?:;»])")
_SPACE_AFTER_GUILLEMET = re.compile(r"« ")
# An apostrophe right after "-" belongs to a slug, not to prose
_STRAIGHT_APOSTROPHE = re.compile(r"(?<!-)'")
_OE = re.compile(r"oe")
_ELLIPSIS = re.compile(r"\.\.\.")


def normalize_typography(html: str) -> str:
    """
    Apply French typography rules to an HTML document.

    - non-breaking space before ``! ? : ; »`` when preceded by a space
    - non-breaking space after ``«`` when followed by a space
    - typographic apostrophe, except right after a hyphen
    - ``oe`` ligature and ``...`` ellipsis

    The non-breaking space is written as the ``&nbsp;`` entity so that HTML
    minification does not collapse it.

    Args:
        html: Rendered page

    Returns:
        The page with French typography

    Example:
        Input:  "l'oeuvre... est là !"
        Output: "l’œuvre… est là&nbsp;!"
    """
    html = _SPACE_BEFORE_PUNCTUATION.sub(NBSP + r"\1", html)
    html = _SPACE_AFTER_GUILLEMET.sub("«" + NBSP, html)
    html = _STRAIGHT_APOSTROPHE.sub("’", html)
    html = _OE.sub("œ", html)
    return _ELLIPSIS.sub("…", html)
