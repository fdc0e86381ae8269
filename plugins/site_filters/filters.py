"""Custom Jinja2 filters for the site templates."""

import logging
from datetime import date, datetime, timezone

import csscompressor
import jsmin as jsmin_lib
from babel.dates import format_date
from dateutil import parser as date_parser

_log = logging.getLogger(__name__)


def limit(items, count):
    """
    Keep the first items of a sequence.

    Example:
        {% for article in articles | limit(5) %}
    """
    return list(items)[:count]


def trim(text):
    """Strip leading and trailing whitespace."""
    return str(text).strip()


def _as_utc(value) -> datetime:
    if isinstance(value, str):
        value = date_parser.isoparse(value)
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def date_iso(value):
    """
    Format a date as an ISO-8601 UTC timestamp with milliseconds.

    Naive dates are taken as UTC.

    Example:
        {{ article.date | date_iso }}
        Output: 2019-05-31T00:00:00.000Z
    """
    value = _as_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def date_readable(value, locale="fr"):
    """
    Format a date for readers, in the site language.

    Example:
        {{ article.date | date_readable }}
        Output: 31 mai 2019
    """
    return format_date(_as_utc(value).date(), format="long", locale=locale)


def cssmin(code):
    """Minify a CSS snippet."""
    return csscompressor.compress(code)


def jsmin(code):
    """
    Minify a JavaScript snippet.

    Minification errors are logged and the code is kept as written.
    """
    try:
        return jsmin_lib.jsmin(code)
    except Exception:
        _log.exception("jsmin failed, keeping unminified script")
        return code
