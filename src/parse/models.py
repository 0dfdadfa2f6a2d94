"""Data models for scraped rules, games and invoices."""
import datetime as dt
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DEADLINE_DAYS = 60


class RuleDocument(BaseModel):
    """A rule document advertised on a broadcaster listing page."""

    model_config = ConfigDict(frozen=True)

    title: str
    link: Optional[str] = Field(default=None, description="Absolute URL of the rule page or PDF")
    channel: str
    date: Optional[str] = Field(default=None, description="Publish date as shown on the listing")


class RefundInfo(BaseModel):
    """Refund conditions parsed from a rule section."""

    model_config = ConfigDict(frozen=True)

    is_refundable: bool = False
    address: Optional[str] = None
    deadline_days: int = DEFAULT_DEADLINE_DAYS
    required_documents: list[str] = Field(default_factory=list)
    raw_matched_text: str = ""
    reason: Optional[str] = None


class RuleDetails(BaseModel):
    """Full text of a rule document with its parsed refund info."""

    model_config = ConfigDict(frozen=True)

    url: str
    channel: str
    content: str = ""
    refund_info: RefundInfo


class GameType(str, Enum):
    SMS = "SMS"
    PHONE_CALL = "PHONE_CALL"
    WEB = "WEB"
    MIXED = "MIXED"
    OTHER = "OTHER"


class GameListing(BaseModel):
    """An active paid game discovered on a broadcaster listing."""

    model_config = ConfigDict(frozen=True)

    id: str
    show_id: str = Field(..., description="Normalized show slug, shared by games of the same show")
    title: str
    description: str = ""
    type: GameType = GameType.SMS
    channel: str
    phone_number: str = ""
    cost: float = Field(default=0.0, description="Cost per participation, EUR assumed")
    refund_address: str = ""
    rules_url: str
    image_url: Optional[str] = None
    participation_method: str = ""
    reimbursement_deadline: int = DEFAULT_DEADLINE_DAYS
    tmdb_id: Optional[int] = None


class InvoiceStatus(str, Enum):
    NEW = "NEW"
    DOWNLOADED = "DOWNLOADED"
    ANALYZED = "ANALYZED"
    EDITED = "EDITED"
    REFUND_REQUESTED = "REFUND_REQUESTED"
    REFUND_RECEIVED = "REFUND_RECEIVED"


class InvoiceRecord(BaseModel):
    """A telecom invoice reconstructed from the provider response."""

    model_config = ConfigDict(frozen=True)

    id: str
    phone_number: str
    date: dt.date
    amount: float = 0.0
    pdf_url: str
    status: InvoiceStatus = InvoiceStatus.NEW
    operator_id: str = "FREE"
    local_pdf_path: Optional[str] = None


class InvoiceDownload(BaseModel):
    """Result of downloading an invoice PDF."""

    model_config = ConfigDict(frozen=True)

    invoice: InvoiceRecord
    path: str
    is_suspect: bool = Field(default=False, description="Bytes did not start with %PDF")


class InvoiceGameFee(BaseModel):
    """A premium game charge found on an invoice."""

    model_config = ConfigDict(frozen=True)

    id: str
    invoice_id: str
    game_id: Optional[str] = None
    phone_number: str
    amount: float
    date: dt.date
    keyword: Optional[str] = None


class ShowMetadata(BaseModel):
    """Poster and backdrop of a show, as returned by the metadata lookup."""

    model_config = ConfigDict(frozen=True)

    tmdb_id: int
    title: str
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None


class RefundabilityReport(BaseModel):
    """Answer to "can this game be refunded, and how"."""

    model_config = ConfigDict(frozen=True)

    channel: str
    game_name: str
    date: str
    is_refundable: bool
    refund_deadline: int
    refund_address: Optional[str] = None
    required_documents: list[str] = Field(default_factory=list)
    rules_url: Optional[str] = None
    source: str = Field(default="default", description="rules or default")
