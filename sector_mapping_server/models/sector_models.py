"""
Domain models for ATECO codes, onboarding sectors and Damodaran industries.

Clear, purposeful data structures that represent the sector mapping layer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

# Damodaran industry names are opaque labels from the valuation dataset
DamodaranIndustry = str


class AtecoMacroCode(str, Enum):
    """
    Macro sectors of the Italian ATECO classification used by the product.

    Only the macro groups that onboarding can map to are listed.
    """

    A = "A"  # Agriculture
    C = "C"  # Manufacturing
    F = "F"  # Construction
    G = "G"  # Trade & Commerce
    H = "H"  # Transportation
    I = "I"  # Accommodation & Food Services  # noqa: E741
    K = "K"  # Information & Communication (ICT)
    M = "M"  # Real Estate
    O = "O"  # Professional & Support Services  # noqa: E741
    R = "R"  # Healthcare


class OnboardingSector(str, Enum):
    """
    User-facing macro sectors offered during onboarding.

    Values are the exact labels shown to users and accepted over the API.
    """

    SOFTWARE_SAAS_IT = "Software / SaaS / IT"
    IT_SERVICES = "IT Services / IT Consulting / System Integrator"
    ECOMMERCE_RETAIL = "E-commerce / Retail / Marketplace"
    FINTECH = "FinTech / Financial Services / Payments / InsurTech"
    HEALTH = "Health / MedTech / Pharma / Wellness"
    EDUCATION = "Education / Training / HR Tech"
    MEDIA = "Media / Publishing / Advertising / Creator economy"
    TOURISM = "Tourism / Hospitality / Food Service"
    TRANSPORT = "Transport / Logistics / Mobility"
    MANUFACTURING = "Manufacturing / Industry / Mechanics"
    AGRIFOOD = "Agri-food / Agriculture / Food Production"
    ENERGY = "Energy / Utilities / Cleantech"
    CONSTRUCTION = "Construction / Real Estate"
    PROFESSIONAL_SERVICES = "Professional Services (advisory, legal, accounting)"
    BUSINESS_SERVICES = "Business Services (facility, outsourcing, etc.)"
    OTHER = "Other (with description)"

    @classmethod
    def from_label(cls, label: str) -> "OnboardingSector | None":
        """Return the sector for an exact label, or None if unrecognized."""
        try:
            return cls(label)
        except ValueError:
            return None


@dataclass(frozen=True)
class AtecoMacro:
    """An ATECO macro sector with the 2-digit divisions it groups."""

    code: AtecoMacroCode
    name: str
    digit_codes: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "name": self.name,
            "digitCodes": list(self.digit_codes),
        }


@dataclass(frozen=True)
class Ateco2Digit:
    """
    One row of the ATECO 2-digit catalog.

    The code is the unique key; every code belongs to exactly one macro.
    """

    code: str
    macro_code: AtecoMacroCode
    macro_name: str
    description: str

    @property
    def display_label(self) -> str:
        """Label used in pickers, e.g. "62 - Software production..."."""
        return f"{self.code} - {self.description}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "macroCode": self.macro_code.value,
            "macroName": self.macro_name,
            "description": self.description,
        }


@dataclass(frozen=True)
class AtecoSearchResult:
    """A search hit over the ATECO catalog, with its display label."""

    code: str
    macro_code: AtecoMacroCode
    macro_name: str
    description: str
    display_label: str

    @classmethod
    def from_entry(cls, entry: Ateco2Digit) -> "AtecoSearchResult":
        return cls(
            code=entry.code,
            macro_code=entry.macro_code,
            macro_name=entry.macro_name,
            description=entry.description,
            display_label=entry.display_label,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "macroCode": self.macro_code.value,
            "macroName": self.macro_name,
            "description": self.description,
            "displayLabel": self.display_label,
        }


@dataclass(frozen=True)
class DamodaranMapping:
    """
    Weighted Damodaran industries for one onboarding sector.

    Weights are percentages and are expected to total 100.
    """

    industry1: DamodaranIndustry
    industry2: DamodaranIndustry
    industry3: DamodaranIndustry
    weight1: int
    weight2: int
    weight3: int
    notes: str | None = None  # Disambiguation rules, free text

    @property
    def industries(self) -> tuple[DamodaranIndustry, ...]:
        return (self.industry1, self.industry2, self.industry3)

    @property
    def total_weight(self) -> int:
        return self.weight1 + self.weight2 + self.weight3


@dataclass(frozen=True)
class SectorMapping:
    """
    Master mapping row: one onboarding sector joined to ATECO and Damodaran.
    """

    onboarding_sector: OnboardingSector
    ateco_macro_primary: AtecoMacroCode
    ateco_macro_primary_name: str
    suggested_ateco_codes: tuple[str, ...]
    damodaran_mapping: DamodaranMapping
    ateco_macro_secondary: AtecoMacroCode | None = None
    ateco_macro_secondary_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result = {
            "onboardingSector": self.onboarding_sector.value,
            "atecoMacroPrimary": self.ateco_macro_primary.value,
            "atecoMacroPrimaryName": self.ateco_macro_primary_name,
            "suggestedAtecoCodes": list(self.suggested_ateco_codes),
        }
        if self.ateco_macro_secondary is not None:
            result["atecoMacroSecondary"] = self.ateco_macro_secondary.value
            result["atecoMacroSecondaryName"] = self.ateco_macro_secondary_name
        return result


@dataclass(frozen=True)
class IndustryWeights:
    """Percentage weights of the three resolved industries."""

    primary: int
    secondary: int
    tertiary: int

    @property
    def total(self) -> int:
        return self.primary + self.secondary + self.tertiary


@dataclass(frozen=True)
class DamodaranIndustries:
    """The three weighted Damodaran industries of a resolution."""

    primary: DamodaranIndustry
    secondary: DamodaranIndustry
    tertiary: DamodaranIndustry
    weights: IndustryWeights


@dataclass(frozen=True)
class SectorResolution:
    """
    Result of resolving an onboarding sector to Damodaran industries.

    Built fresh for every call and owned by the caller.
    """

    onboarding_sector: OnboardingSector
    damodaran_industries: DamodaranIndustries
    ateco_code: str | None = None
    disambiguation_notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape served by the API."""
        industries = self.damodaran_industries
        result: dict[str, Any] = {
            "onboardingSector": self.onboarding_sector.value,
            "damodaranIndustries": {
                "primary": industries.primary,
                "secondary": industries.secondary,
                "tertiary": industries.tertiary,
                "weights": {
                    "primary": industries.weights.primary,
                    "secondary": industries.weights.secondary,
                    "tertiary": industries.weights.tertiary,
                },
            },
        }
        if self.ateco_code is not None:
            result["atecoCode"] = self.ateco_code
        if self.disambiguation_notes is not None:
            result["disambiguationNotes"] = self.disambiguation_notes
        return result
