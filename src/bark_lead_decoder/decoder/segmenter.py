"""Provider card segmentation.

Splits a directory page into the markup fragments that each hold one provider
listing. Cards are located with BeautifulSoup rather than by slicing the raw
text, so a card's fragment ends where its element closes. The parser repairs
malformed markup in its own way (html.parser semantics): an unclosed card may
swallow the cards after it. Nothing here assumes well-formed HTML and
segmentation never raises.

Markers must equal a whole class token: wrappers such as "provider-listings"
and card parts such as "provider-card-header" are not cards.
"""

import logging
from typing import Any, List, Optional, Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag

from bark_lead_decoder.models.lead import ProviderCardFragment

logger = logging.getLogger(__name__)

CARD_MARKERS = (
    "provider-card",
    "pro-card",
    "provider-listing",
    "service-provider",
)
CARD_TAGS = ["div", "article", "section", "li"]
CARD_TESTID = "provider-card"


class CardSegmenter:
    """Locates provider cards in an HTML document."""

    def __init__(self, markers: Optional[Sequence[str]] = None, parser: str = "html.parser"):
        self.markers = tuple(m.lower() for m in (markers or CARD_MARKERS))
        self.parser = parser

    def _has_marker(self, tag: Tag) -> bool:
        classes = tag.get("class") or []
        if isinstance(classes, str):
            classes = classes.split()
        tokens = {c.lower() for c in classes}
        if tokens.intersection(self.markers):
            return True
        return (tag.get("data-testid") or "").lower() == CARD_TESTID

    def _is_nested(self, tag: Tag) -> bool:
        for parent in tag.parents:
            if parent.name in CARD_TAGS and self._has_marker(parent):
                return True
        return False

    def segment(self, html: Any) -> List[ProviderCardFragment]:
        """
        Split a document into provider card fragments.

        Args:
            html: Page markup. Anything that is not a non-empty string yields
                no fragments.

        Returns:
            List[ProviderCardFragment]: Outermost cards in document order
        """
        if not isinstance(html, str) or not html.strip():
            return []

        soup = BeautifulSoup(html, self.parser)
        candidates = soup.find_all(CARD_TAGS, recursive=True)

        fragments = []
        for tag in candidates:
            if not self._has_marker(tag) or self._is_nested(tag):
                continue
            fragments.append(ProviderCardFragment(index=len(fragments), html=str(tag)))

        logger.debug(f"Segmented {len(fragments)} provider cards")
        return fragments
