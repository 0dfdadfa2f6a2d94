"""Extract structured refund conditions from a located rule section."""
import logging
import re
from typing import Optional

from src.parse.models import DEFAULT_DEADLINE_DAYS, RefundInfo

logger = logging.getLogger(__name__)

ADDRESS_PATTERN = re.compile(
    r"(?:adresser|envoyer)\s+(?:(?:la|votre|sa)\s+demande\s+)?(?:par\s+)?(?:courrier\s+)?"
    r"(?:postal\s+)?(?:à\s+)?(?:l['’]adresse\s+(?:suivante\s+)?)?:?\s*([^.]+)",
    re.IGNORECASE,
)

DEADLINE_PATTERNS = [
    re.compile(r"dans\s+(?:un\s+)?délai\s+(?:de\s+)?(\d+)(?:\s+jours)?", re.IGNORECASE),
    re.compile(r"sous\s+(\d+)\s+jours", re.IGNORECASE),
]

DOC_PHONE_BILL = "Facture téléphonique avec frais surlignés"
DOC_BANK_PROOF = "RIB (Relevé d'Identité Bancaire)"
DOC_REQUEST_LETTER = "Lettre de demande de remboursement"

# Checked in this order, appended in this order
DOCUMENT_FINGERPRINTS = [
    (DOC_PHONE_BILL, re.compile(r"facture\s+(?:détaillée|téléphonique)", re.IGNORECASE)),
    (DOC_BANK_PROOF, re.compile(r"\bRIB\b|Relevé\s+d['’]\s?Identité\s+Bancaire", re.IGNORECASE)),
    (DOC_REQUEST_LETTER, re.compile(r"demande\s+(?:écrite|manuscrite)|\blettre\b", re.IGNORECASE)),
]

NOT_FOUND_REASON = "refund section not found"


def extract_deadline_days(text: str) -> Optional[int]:
    """First "dans un délai de N jours" style deadline, or None."""
    for pattern in DEADLINE_PATTERNS:
        match = pattern.search(text or "")
        if match:
            return int(match.group(1))
    return None


def extract_address(text: str) -> Optional[str]:
    match = ADDRESS_PATTERN.search(text or "")
    if not match:
        return None
    address = " ".join(match.group(1).split())
    return address or None


def extract_required_documents(text: str) -> list[str]:
    return [name for name, pattern in DOCUMENT_FINGERPRINTS if pattern.search(text or "")]


class RefundInfoExtractor:
    """Turns a refund section into a RefundInfo."""

    def extract(self, section: Optional[str]) -> RefundInfo:
        if section is None:
            return RefundInfo(is_refundable=False, reason=NOT_FOUND_REASON)

        deadline = extract_deadline_days(section)
        info = RefundInfo(
            is_refundable=True,
            address=extract_address(section),
            deadline_days=deadline if deadline is not None else DEFAULT_DEADLINE_DAYS,
            required_documents=extract_required_documents(section),
            raw_matched_text=section,
        )
        logger.debug(
            f"Refund info: address={'yes' if info.address else 'no'} "
            f"deadline={info.deadline_days} docs={len(info.required_documents)}"
        )
        return info
