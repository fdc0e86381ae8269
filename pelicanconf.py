import logging
import os

AUTHOR = "Carnet"
SITENAME = "Carnet de tests"
SITEURL = ""

PATH = "content"

TIMEZONE = "Europe/Paris"

DEFAULT_LANG = "fr"
LOCALE = ("fr_FR.UTF-8", "fr_FR", "fr")


def setup_logging(log_file_name: str | None = None, console_level: int = logging.INFO):
    """
    Log to the console and, when log_file_name is set, to a file at debug level.

    Returns:
        logging.Logger: Configured root logger
    """

    logging.addLevelName(logging.DEBUG, "🔍")
    logging.addLevelName(logging.INFO, "🆗")
    logging.addLevelName(logging.WARNING, "⚠️ ")
    logging.addLevelName(logging.ERROR, "❌")
    logging.addLevelName(logging.CRITICAL, "🔥")

    formatter = logging.Formatter(
        "%(asctime)s.%(msecs)03d %(levelname)s | %(message)s (%(name)s)", datefmt="%H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # The file gets the [benchmark] timings
    if log_file_name:
        file_handler = logging.FileHandler(log_file_name)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return root_logger


setup_logging(os.environ.get("BUILD_LOG_FILE"))

# RSS/Atom feeds are not generated by this site
FEED_ALL_ATOM = None
CATEGORY_FEED_ATOM = None
TRANSLATION_FEED_ATOM = None
AUTHOR_FEED_ATOM = None
AUTHOR_FEED_RSS = None

DEFAULT_PAGINATION = 10

# Markdown content: "tests/<slug>.md" and "posts/<slug>.md"
ARTICLE_URL = "{category}/{slug}.html"
ARTICLE_SAVE_AS = "{category}/{slug}.html"
SLUGIFY_SOURCE = "basename"

MARKDOWN = {
    "extension_configs": {
        "markdown.extensions.extra": {},
        "markdown.extensions.md_in_html": {},
    },
    "output_format": "html5",
}

# Passthrough copies
STATIC_PATHS = ["CNAME", "fonts", "img"]
EXTRA_PATH_METADATA = {
    "CNAME": {"path": "CNAME"},
}

# Plugins
PLUGIN_PATHS = ["plugins"]
PLUGINS = [
    "site_filters",
    "shortcodes",
    "crossref",
    "html_transform",
]

# Collections for the {% test %} and {% post %} tags
COLLECTION_PATHS = {"test": "tests", "post": "posts"}
COLLECTION_GROUPS = {"testsAndPosts": ["post", "test"]}

# Images
IMAGES_PATH = "images"
IMAGE_FORMATS = ["webp", "jpeg"]

# Output transform
INLINE_STYLESHEET = "themes/carnet/static/css/theme.css"
# HTML minification is on unless NO_MINIFY is set, e.g. "NO_MINIFY=1 pelican content"
# HTML_MINIFY = False

# Theme
THEME = "themes/carnet"
