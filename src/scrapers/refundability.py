"""Answer whether a game played on a given day can be refunded."""
import logging

from src.parse.models import DEFAULT_DEADLINE_DAYS, RefundabilityReport
from src.parse.refund_info import DOC_BANK_PROOF, DOC_PHONE_BILL, DOC_REQUEST_LETTER
from src.scrapers.base import ChannelScraper

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENTS = [DOC_PHONE_BILL, DOC_BANK_PROOF, DOC_REQUEST_LETTER]


def default_refund_address(channel: str) -> str:
    return f"Service Remboursement Jeux, {channel.upper()}, 75000 Paris"


def default_report(channel: str, game_name: str, date: str) -> RefundabilityReport:
    """Statutory default: premium game fees are refundable within 60 days."""
    return RefundabilityReport(
        channel=channel,
        game_name=game_name,
        date=date,
        is_refundable=True,
        refund_deadline=DEFAULT_DEADLINE_DAYS,
        refund_address=default_refund_address(channel),
        required_documents=list(DEFAULT_DOCUMENTS),
        source="default",
    )


async def check_refundability(scraper: ChannelScraper, game_name: str, date: str) -> RefundabilityReport:
    """
    Look for a rule document mentioning the game and report its refund terms.

    Falls back to the default answer when no rule matches. Transport errors
    while listing or reading rules propagate.
    """
    needle = game_name.strip().lower()
    rules = await scraper.list_rules()
    rule = next((r for r in rules if r.link and needle and needle in r.title.lower()), None)
    if rule is None:
        logger.info(f"[REFUND] no rule for '{game_name}' on {scraper.channel}, using default answer")
        return default_report(scraper.channel, game_name, date)

    details = await scraper.get_rule_details(rule.link)
    info = details.refund_info
    return RefundabilityReport(
        channel=scraper.channel,
        game_name=game_name,
        date=date,
        is_refundable=info.is_refundable,
        refund_deadline=info.deadline_days,
        refund_address=info.address,
        required_documents=info.required_documents,
        rules_url=rule.link,
        source="rules",
    )
