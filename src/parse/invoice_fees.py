"""Detect premium game charges in the text of a telecom invoice."""
import logging
import re
import uuid
from typing import Iterable, Optional

from src.parse.models import GameListing, InvoiceGameFee, InvoiceRecord
from src.parse.text import AMOUNT_EURO_PATTERN, parse_amount

logger = logging.getLogger(__name__)

# Lines mentioning one of these are likely premium game charges
GAME_KEYWORDS = [
    "jeu", "sms+", "audiotel", "3680", "3280", "71414", "72525", "73838",
    "koh lanta", "the voice", "12 coups", "les 12 coups", "tf1", "m6", "france 2",
]

NEARBY_WINDOW = 100
SHORT_NUMBER_PATTERN = re.compile(r"\b(\d{3,5})\b")


def _window(text: str, index: int) -> str:
    return text[max(0, index - NEARBY_WINDOW):index + NEARBY_WINDOW]


def find_amount_near(text: str, needle: str) -> float:
    """First "N,NN €" amount around the first occurrence of needle, 0.0 if none."""
    index = text.find(needle)
    if index == -1:
        return 0.0
    match = AMOUNT_EURO_PATTERN.search(_window(text, index))
    if not match:
        return 0.0
    return parse_amount(match.group(1)) or 0.0


def find_short_numbers_near_keyword(text: str, keyword: str) -> list[str]:
    """3 to 5 digit numbers around the first occurrence of keyword (case-insensitive)."""
    index = text.lower().find(keyword.lower())
    if index == -1:
        return []
    return SHORT_NUMBER_PATTERN.findall(_window(text, index))


def _fee(invoice: InvoiceRecord, phone_number: str, amount: float,
         game_id: Optional[str] = None, keyword: Optional[str] = None) -> InvoiceGameFee:
    return InvoiceGameFee(
        id=str(uuid.uuid4()),
        invoice_id=invoice.id,
        game_id=game_id,
        phone_number=phone_number,
        amount=amount,
        date=invoice.date,
        keyword=keyword,
    )


def find_game_fees(
    text: str,
    invoice: InvoiceRecord,
    known_games: Iterable[GameListing] = (),
) -> list[InvoiceGameFee]:
    """
    Known game numbers first; generic keywords only when none matched.

    Keyword hits are deduplicated by short number since several keywords
    usually surround the same charge line.
    """
    if not text:
        return []

    fees = []
    for game in known_games:
        if not game.phone_number or game.phone_number not in text:
            continue
        amount = find_amount_near(text, game.phone_number)
        if amount > 0:
            fees.append(_fee(invoice, game.phone_number, amount, game_id=game.id))

    if fees:
        logger.info(f"[INVOICES] invoice={invoice.id} known game fees={len(fees)}")
        return fees

    seen: set[str] = set()
    lowered = text.lower()
    for keyword in GAME_KEYWORDS:
        if keyword not in lowered:
            continue
        for number in find_short_numbers_near_keyword(text, keyword):
            if number in seen:
                continue
            amount = find_amount_near(text, number)
            if amount > 0:
                seen.add(number)
                fees.append(_fee(invoice, number, amount, keyword=keyword))

    logger.info(f"[INVOICES] invoice={invoice.id} keyword game fees={len(fees)}")
    return fees
