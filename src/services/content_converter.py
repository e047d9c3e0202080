import re

from bs4 import BeautifulSoup, Comment
from bs4.exceptions import ParserRejectedMarkup

from src.utils.logger import get_logger

logger = get_logger(__name__)

DROPPED_TAGS = ["script", "style", "noscript", "template", "svg", "head", "iframe"]

BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3",
    "h4", "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre",
    "section", "table", "tbody", "td", "th", "thead", "tr", "ul",
]

TAG_PATTERN = re.compile(r"<[^>]*>")


def _clean_lines(text: str) -> str:
    lines = (" ".join(line.split()) for line in text.splitlines())
    return "\n".join(line for line in lines if line)


def _strip_tags(markup: str) -> str:
    return _clean_lines(TAG_PATTERN.sub("\n", markup))


def to_text(markup: str) -> str:
    """Convert fetched HTML into flat text, one block element per line."""
    if not markup:
        return ""

    try:
        soup = BeautifulSoup(markup, "html.parser")
    except ParserRejectedMarkup as e:
        logger.warning(f"Markup rejected by parser, stripping tags instead: {e}")
        return _strip_tags(markup)

    for tag in soup(DROPPED_TAGS):
        tag.extract()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    for br in soup.find_all("br"):
        br.replace_with("\n")
    for block in soup.find_all(BLOCK_TAGS):
        block.insert_before("\n")
        block.insert_after("\n")

    return _clean_lines(soup.get_text())
