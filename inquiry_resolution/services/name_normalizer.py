"""
Company name normalization.

Produces a comparison key only; the customer's original company name is
what gets stored and displayed.
"""

import re
import unicodedata

# Legal-form tokens seen on customer names (Indonesian, Indian, European,
# US and Southeast Asian registrations).
LEGAL_FORM_TOKENS = frozenset(
    {
        "pt", "tbk", "persero", "cv", "ud", "fa",
        "inc", "incorporated", "corp", "corporation", "co", "company",
        "ltd", "limited", "llc", "llp", "lp", "plc",
        "pvt", "private", "pte", "sdn", "bhd",
        "gmbh", "ag", "kg", "sa", "sas", "sarl", "srl", "spa",
        "bv", "nv", "oy", "ab", "as", "kk",
    }
)

_SEPARATORS = re.compile(r"[^0-9a-z]+")


def normalize_company_name(name: str) -> str:
    """
    Case-fold, drop accents and punctuation, collapse whitespace and strip
    legal-form tokens.

    "PT. Kimia Farma (Persero) Tbk" -> "kimia farma". A name made only of
    legal-form tokens keeps them, so "PT CV" does not collapse to "".
    Blank input returns "".
    """
    if not name or not name.strip():
        return ""

    decomposed = unicodedata.normalize("NFKD", name)
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    lowered = ascii_only.casefold().replace("&", " and ").replace("+", " and ")
    # Dotted abbreviations ("P.T.", "S.A.") join up before splitting.
    lowered = re.sub(r"\b([a-z])\.(?=[a-z]\.)", r"\1", lowered)

    tokens = [token for token in _SEPARATORS.split(lowered) if token]
    meaningful = [token for token in tokens if token not in LEGAL_FORM_TOKENS]
    return " ".join(meaningful or tokens)
