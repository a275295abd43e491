"""Payment description classifier.

Pure functions deriving the intent of a payment from its free-text
description. No database access; no side effects.
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

GENERAL_PROJECT_TITLE = "General Donation"

# Checked in order; the first match wins
SPONSORSHIP_PATTERNS = (
    re.compile(r"\bsponsorship(?:\s+donation)?\s+for\s+(?P<names>.+)", re.IGNORECASE),
    re.compile(r"\bsponsor(?:ing)?\s+(?P<names>.+)", re.IGNORECASE),
)

_TRAILING_QUALIFIER = re.compile(r"\s+-\s+|\s*\(")

CAMPAIGN_PATTERN = re.compile(r"donation\s+for\s+campaign\s+(?P<code>[\w-]+)", re.IGNORECASE)

GENERAL_PATTERNS = (
    re.compile(r"\$\d+(?:\.\d{2})?\s*-\s*general\s+monthly\s+donation", re.IGNORECASE),
    re.compile(r"\bgeneral\s+(?:monthly\s+)?donation\b", re.IGNORECASE),
    re.compile(r"\binvoice\s+[A-Z0-9-]+", re.IGNORECASE),
    re.compile(r"^[\w+\-.]+@[a-z\d\-]+(?:\.[a-z\d\-]+)*\.[a-z]+$", re.IGNORECASE),
    re.compile(r"^\d+$"),
    re.compile(r"subscription\s+creation", re.IGNORECASE),
    re.compile(r"captured\s+via\s+payment\s+app", re.IGNORECASE),
    re.compile(r"payment\s+for\s+stripe\s+app", re.IGNORECASE),
)


@dataclass(frozen=True)
class General:
    """Donation to a general-purpose project.

    ``recognized`` is False when nothing in the description identified it as
    general; such payments need human review rather than auto-routing.
    """

    project_title: str = GENERAL_PROJECT_TITLE
    recognized: bool = True


@dataclass(frozen=True)
class Campaign:
    """Donation to a fundraising campaign."""

    code: Optional[str]
    project_title: str


@dataclass(frozen=True)
class Sponsorship:
    """Child sponsorship payment; one donation per named child."""

    child_names: tuple[str, ...]

    @property
    def child_name(self) -> str:
        return self.child_names[0]


Classification = Union[General, Campaign, Sponsorship]


def canonicalize_name(name: str) -> str:
    """Capitalize each whitespace-separated token: "sangwan  LEE" -> "Sangwan Lee"."""
    return " ".join(token.capitalize() for token in name.split())


def extract_child_names(text: str) -> tuple[str, ...]:
    """Split captured sponsorship text into canonical, de-duplicated child names."""
    # Drop trailing qualifiers such as " - $100" or "(monthly)"
    text = _TRAILING_QUALIFIER.split(text, maxsplit=1)[0]
    names = []
    for part in text.split(","):
        # Stripe joins multi-child plan nicknames with commas, repeating the
        # full "Monthly Sponsorship Donation for ..." prefix in each part
        for pattern in SPONSORSHIP_PATTERNS:
            match = pattern.search(part)
            if match:
                part = _TRAILING_QUALIFIER.split(match.group("names"), maxsplit=1)[0]
                break
        cleaned = canonicalize_name(part.strip(" \t.;:!?()[]\"'-"))
        if cleaned and cleaned not in names:
            names.append(cleaned)
    return tuple(names)


def campaign_project_title(code: str) -> str:
    """Return the catch-all project title for a campaign code."""
    return f"Campaign {code}"


def is_general_description(description: Optional[str]) -> bool:
    """Return True when the description carries a recognized general-donation marker."""
    if description is None or not description.strip():
        return True
    text = description.strip()
    return any(pattern.search(text) for pattern in GENERAL_PATTERNS)


def classify(description: Optional[str], campaign_code: Optional[str] = None) -> Classification:
    """Classify a payment description.

    Total: never raises. Unmatched input yields ``General(recognized=False)``.

    Args:
        description: Free-text payment description (or plan nickname)
        campaign_code: Campaign identifier supplied alongside the row, if any

    Returns:
        Sponsorship, Campaign or General classification
    """
    text = (description or "").strip()

    if text:
        for pattern in SPONSORSHIP_PATTERNS:
            match = pattern.search(text)
            if match:
                names = extract_child_names(match.group("names"))
                if names:
                    return Sponsorship(child_names=names)

        match = CAMPAIGN_PATTERN.search(text)
        if match:
            code = match.group("code")
            return Campaign(code=code, project_title=campaign_project_title(code))

    if campaign_code is not None and campaign_code.strip():
        code = campaign_code.strip()
        return Campaign(code=code, project_title=campaign_project_title(code))

    if is_general_description(text):
        return General()

    return General(recognized=False)
