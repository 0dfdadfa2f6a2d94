"""URL builders for broadcaster and telecom endpoints."""
from src.config import config

TF1_BASE_URL = "https://www.tf1.fr"
TF1_RULES_URL = f"{TF1_BASE_URL}/tf1/gagnants-reglements-remboursement-des-jeux-tv/news"
# TF1 publishes games and rules on the same page
TF1_GAMES_URL = TF1_RULES_URL

M6_RULES_BASE_URL = "https://etvous.m6.fr"
M6_RULES_URL = f"{M6_RULES_BASE_URL}/jeux-concours-antenne-reglements"
M6_BASE_URL = "https://www.m6.fr"
M6_GAMES_URL = f"{M6_BASE_URL}/jeux-concours/"

TMDB_SEARCH_URL = "https://api.themoviedb.org/3/search/tv"
TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"


def get_invoice_list_url(base: str | None = None) -> str:
    """Invoice list of the logged-in account."""
    return f"{(base or config.INVOICE_API_BASE).rstrip('/')}/invoices"


def get_invoice_url(reference: str, base: str | None = None) -> str:
    """Single invoice, by invoice id or phone number."""
    return f"{(base or config.INVOICE_API_BASE).rstrip('/')}/invoice/{reference}"


def get_invoice_page_referer(site_base: str | None = None) -> str:
    return f"{(site_base or config.FREE_BASE_URL).rstrip('/')}/account/v2/mes-factures"
