"""Locate the refund article inside a broadcaster rule document."""
import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

# Sentence fragment that never runs into another "ARTICLE" heading
_SENTENCE = r"(?:(?!\bARTICLE\b)[^.])"

# "ARTICLE 8 - REMBOURSEMENT DES FRAIS DE PARTICIPATION." or
# "REMBOURSEMENT DES FRAIS ..." up to the first period
REFUND_HEADING_PATTERN = re.compile(
    rf"\b(?:ARTICLE|REMBOURSEMENT){_SENTENCE}*?\b(?:REMBOURSEMENT|FRAIS){_SENTENCE}*\.",
    re.IGNORECASE,
)

# Sentence boundary (period or line break) followed by the next heading
NEXT_HEADING_PATTERN = re.compile(r"[.\n]\s*ARTICLE\b", re.IGNORECASE)


class RuleSectionLocator:
    """Finds the refund clause among arbitrary regulatory prose."""

    def locate(self, full_text: Optional[str]) -> Optional[str]:
        """
        Return the first refund article, from its heading up to (excluding)
        the next ARTICLE heading. None when the text has no refund clause.
        """
        if not full_text:
            return None

        heading = REFUND_HEADING_PATTERN.search(full_text)
        if not heading:
            logger.debug("No refund heading found in rule text")
            return None

        # The heading's own period may sit right before the next heading
        next_heading = NEXT_HEADING_PATTERN.search(full_text, heading.end() - 1)
        if next_heading:
            end = next_heading.start()
            if full_text[end] == ".":
                end += 1
        else:
            end = len(full_text)

        section = full_text[heading.start():end].strip()
        logger.debug(f"Refund section located at {heading.start()}-{end} ({len(section)} chars)")
        return section or None


def locate_refund_section(full_text: Optional[str]) -> Optional[str]:
    return RuleSectionLocator().locate(full_text)
