"""
Remove unused rules from a stylesheet.

Selectors are evaluated against the parsed HTML document with soupsieve, so
a rule survives only if at least one of its selectors matches an element of
the page.
"""

import logging
import re

import soupsieve
import tinycss2
from bs4 import BeautifulSoup

_log = logging.getLogger(__name__)

# At-rules holding rules whose relevance depends on the page
CONDITIONAL_AT_RULES = {"media", "supports", "layer", "container", "document", "-moz-document"}

# Pseudo-elements and legacy single-colon pseudo-elements
_PSEUDO_ELEMENT = re.compile(
    r"::[\w-]+(?:\([^)]*\))?|:(?:before|after|first-line|first-letter)\b",
    re.IGNORECASE,
)
# States that depend on the user, not on the document
_DYNAMIC_PSEUDO_CLASS = re.compile(
    r":(?:hover|focus-visible|focus-within|focus|active|visited|target)\b",
    re.IGNORECASE,
)
_TRAILING_COMBINATOR = re.compile(r"[\s>+~]$")


class StylesheetError(ValueError):
    """Raised when the stylesheet cannot be parsed."""


def purge_css(css: str, html: str) -> str:
    """
    Keep only the CSS rules used by an HTML document.

    Args:
        css: Full stylesheet
        html: Rendered page

    Returns:
        The stylesheet restricted to rules matching the page

    Raises:
        StylesheetError: If the stylesheet contains a syntax error
    """
    soup = BeautifulSoup(html, "html.parser")
    rules = tinycss2.parse_stylesheet(css, skip_comments=True, skip_whitespace=True)
    return "".join(_filter_rules(rules, soup))


def _filter_rules(rules, soup) -> list[str]:
    kept = []
    for rule in rules:
        if rule.type == "error":
            raise StylesheetError(
                f"Invalid CSS at line {rule.source_line}, column {rule.source_column}: {rule.message}"
            )

        if rule.type == "qualified-rule":
            selectors = [s for s in _split_selectors(rule.prelude) if _is_used(s, soup)]
            if selectors:
                kept.append(",".join(selectors) + "{" + tinycss2.serialize(rule.content).strip() + "}")

        elif rule.type == "at-rule":
            if rule.content is not None and rule.lower_at_keyword in CONDITIONAL_AT_RULES:
                inner = tinycss2.parse_rule_list(rule.content, skip_comments=True, skip_whitespace=True)
                body = _filter_rules(inner, soup)
                if body:
                    prelude = tinycss2.serialize(rule.prelude).strip()
                    kept.append(f"@{rule.at_keyword} {prelude}{{{''.join(body)}}}")
            else:
                kept.append(rule.serialize())
    return kept


def _split_selectors(prelude) -> list[str]:
    selectors = []
    current = []
    for token in prelude:
        if token.type == "literal" and token.value == ",":
            selectors.append(tinycss2.serialize(current).strip())
            current = []
        else:
            current.append(token)
    selectors.append(tinycss2.serialize(current).strip())
    return [s for s in selectors if s]


def _matchable(selector: str) -> str:
    selector = _PSEUDO_ELEMENT.sub("", selector)
    selector = _DYNAMIC_PSEUDO_CLASS.sub("", selector).strip()
    if not selector or _TRAILING_COMBINATOR.search(selector):
        selector = f"{selector} *".strip()
    return selector


def _is_used(selector: str, soup) -> bool:
    try:
        return soup.select_one(_matchable(selector)) is not None
    except soupsieve.SelectorSyntaxError:
        _log.debug(f"Keeping selector soupsieve cannot evaluate: {selector}")
        return True
