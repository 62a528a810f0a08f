"""
Static reference tables for ATECO codes, Damodaran industries and sector mappings.

The tables are compiled into the package and assembled once per process into
an immutable ReferenceTables object. Construction validates the invariants the
lookup layer relies on, so a broken table fails at startup instead of at
request time.

Sources: ATECO macro and 2-digit lists, the Damodaran industry list and the
onboarding-sector mapping sheet maintained by the product team.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType

from ..models.sector_models import (
    Ateco2Digit,
    AtecoMacro,
    AtecoMacroCode,
    DamodaranIndustry,
    DamodaranMapping,
    OnboardingSector,
    SectorMapping,
)
from .errors import ReferenceDataError

logger = logging.getLogger(__name__)


# --- ATECO ---

ATECO_MACROS: tuple[AtecoMacro, ...] = (
    AtecoMacro(AtecoMacroCode.A, "Agriculture", ("01", "02", "03")),
    AtecoMacro(
        AtecoMacroCode.C,
        "Manufacturing",
        (
            "10", "11", "12", "13", "14", "15", "16", "17", "18", "19",
            "20", "21", "22", "23", "24", "25", "26", "27", "28", "29",
            "30", "31", "32", "33",
        ),
    ),
    AtecoMacro(AtecoMacroCode.F, "Construction", ("41", "42", "43")),
    AtecoMacro(AtecoMacroCode.G, "Trade & Commerce", ("46", "47")),
    AtecoMacro(AtecoMacroCode.H, "Transportation", ("49", "50", "51", "52", "53")),
    AtecoMacro(AtecoMacroCode.I, "Accommodation & Food Services", ("55", "56")),
    AtecoMacro(AtecoMacroCode.K, "Information & Communication (ICT)", ("61", "62", "63")),
    AtecoMacro(AtecoMacroCode.M, "Real Estate", ("68",)),
    AtecoMacro(
        AtecoMacroCode.O,
        "Professional & Support Services",
        ("77", "78", "79", "80", "81", "82"),
    ),
    AtecoMacro(AtecoMacroCode.R, "Healthcare", ("86", "87", "88")),
)

ATECO_CODE_DESCRIPTIONS: Mapping[str, str] = MappingProxyType(
    {
        "01": "Crop and animal production, hunting",
        "02": "Forestry and logging",
        "03": "Fishing and aquaculture",
        "10": "Food products",
        "11": "Beverages",
        "12": "Tobacco products",
        "13": "Textiles",
        "14": "Wearing apparel",
        "15": "Leather and related products",
        "16": "Wood and wood products",
        "17": "Paper and paper products",
        "18": "Printing and reproduction",
        "19": "Coke and refined petroleum",
        "20": "Chemicals and chemical products",
        "21": "Pharmaceuticals",
        "22": "Rubber and plastic products",
        "23": "Non-metallic mineral products",
        "24": "Basic metals",
        "25": "Fabricated metal products",
        "26": "Computer, electronic, optical products",
        "27": "Electrical equipment",
        "28": "Machinery and equipment",
        "29": "Motor vehicles, trailers",
        "30": "Other transport equipment",
        "31": "Furniture",
        "32": "Other manufacturing",
        "33": "Repair and installation of machinery",
        "41": "Construction of buildings",
        "42": "Civil engineering",
        "43": "Specialized construction activities",
        "46": "Wholesale trade",
        "47": "Retail trade",
        "49": "Land transport and pipelines",
        "50": "Water transport",
        "51": "Air transport",
        "52": "Warehousing and support activities",
        "53": "Postal and courier activities",
        "55": "Accommodation",
        "56": "Food and beverage service",
        "61": "Telecommunications",
        "62": "Software production, computer programming and consultancy",
        "63": "Information service activities",
        "68": "Real estate activities",
        "77": "Rental and leasing activities",
        "78": "Employment activities",
        "79": "Travel agency and tour operator",
        "80": "Security and investigation",
        "81": "Services to buildings and landscape",
        "82": "Office administrative and support",
        "86": "Human health activities",
        "87": "Residential care activities",
        "88": "Social work activities",
    }
)


# --- Damodaran ---

DAMODARAN_INDUSTRIES: tuple[DamodaranIndustry, ...] = (
    "Advertising",
    "Aerospace/Defense",
    "Air Transport",
    "Apparel",
    "Auto & Truck",
    "Auto Parts",
    "Bank (Money Center)",
    "Banks (Regional)",
    "Beverage (Alcoholic)",
    "Beverage (Soft)",
    "Broadcasting",
    "Brokerage & Investment Banking",
    "Building Materials",
    "Business & Consumer Services",
    "Cable TV",
    "Chemical (Basic)",
    "Chemical (Diversified)",
    "Chemical (Specialty)",
    "Coal & Related Energy",
    "Computer Services",
    "Computers/Peripherals",
    "Construction Supplies",
    "Diversified",
    "Drugs (Biotechnology)",
    "Drugs (Pharmaceutical)",
    "Education",
    "Electrical Equipment",
    "Electronics (Consumer & Office)",
    "Electronics (General)",
    "Engineering/Construction",
    "Entertainment",
    "Environmental & Waste Services",
    "Farming/Agriculture",
    "Financial Svcs. (Non-bank & Insurance)",
    "Food Processing",
    "Food Wholesalers",
    "Furn/Home Furnishings",
    "Green & Renewable Energy",
    "Healthcare Products",
    "Healthcare Support Services",
    # Spelling follows the published dataset
    "Heathcare Information and Technology",
    "Homebuilding",
    "Hospitals/Healthcare Facilities",
    "Hotel/Gaming",
    "Household Products",
    "Information Services",
    "Insurance (General)",
    "Insurance (Life)",
    "Insurance (Prop/Cas.)",
    "Investments & Asset Management",
    "Machinery",
    "Metals & Mining",
    "Office Equipment & Services",
    "Oil/Gas (Integrated)",
    "Oil/Gas (Production and Exploration)",
    "Oil/Gas Distribution",
    "Oilfield Svcs/Equip.",
    "Packaging & Container",
    "Paper/Forest Products",
    "Power",
    "Precious Metals",
    "Publishing & Newspapers",
    "R.E.I.T.",
    "Real Estate (Development)",
    "Real Estate (General/Diversified)",
    "Real Estate (Operations & Services)",
    "Recreation",
    "Reinsurance",
    "Restaurant/Dining",
    "Retail (Automotive)",
    "Retail (Building Supply)",
    "Retail (Distributors)",
    "Retail (General)",
    "Retail (Grocery and Food)",
    "Retail (REITs)",
    "Retail (Special Lines)",
    "Rubber& Tires",
    "Semiconductor",
    "Semiconductor Equip",
    "Shipbuilding & Marine",
    "Shoe",
    "Software (Entertainment)",
    "Software (Internet)",
    "Software (System & Application)",
    "Steel",
    "Telecom (Wireless)",
    "Telecom. Equipment",
    "Telecom. Services",
    "Tobacco",
    "Transportation",
    "Transportation (Railroads)",
    "Trucking",
    "Utility (General)",
    "Utility (Water)",
)


# --- Onboarding sector mapping ---
# Notes are kept in Italian, as written by the analysts who maintain the sheet.

SECTOR_MAPPINGS: tuple[SectorMapping, ...] = (
    SectorMapping(
        onboarding_sector=OnboardingSector.SOFTWARE_SAAS_IT,
        ateco_macro_primary=AtecoMacroCode.K,
        ateco_macro_primary_name="ICT",
        suggested_ateco_codes=("61", "62", "63"),
        damodaran_mapping=DamodaranMapping(
            industry1="Software (System & Application)",
            industry2="Software (Internet)",
            industry3="Information Services",
            weight1=70,
            weight2=20,
            weight3=10,
            notes="Se marketplace/abbonamenti web-first, aumenta peso su Software (Internet).",
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.IT_SERVICES,
        ateco_macro_primary=AtecoMacroCode.K,
        ateco_macro_primary_name="ICT",
        suggested_ateco_codes=("62", "63", "61"),
        damodaran_mapping=DamodaranMapping(
            industry1="Computer Services",
            industry2="Information Services",
            industry3="Telecom. Services",
            weight1=70,
            weight2=20,
            weight3=10,
            notes="Per MSP/outsourcing IT: Computer Services è spesso il comparabile più diretto.",
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.ECOMMERCE_RETAIL,
        ateco_macro_primary=AtecoMacroCode.G,
        ateco_macro_primary_name="Commercio",
        suggested_ateco_codes=("47", "46"),
        damodaran_mapping=DamodaranMapping(
            industry1="Retail (General)",
            industry2="Retail (Special Lines)",
            industry3="Retail (Distributors)",
            weight1=60,
            weight2=25,
            weight3=15,
            notes="Se food/grocery: usa Retail (Grocery and Food) come alternativa.",
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.FINTECH,
        ateco_macro_primary=AtecoMacroCode.K,
        ateco_macro_primary_name="ICT",
        suggested_ateco_codes=("61", "62", "63"),
        damodaran_mapping=DamodaranMapping(
            industry1="Financial Svcs. (Non-bank & Insurance)",
            industry2="Investments & Asset Management",
            industry3="Brokerage & Investment Banking",
            weight1=60,
            weight2=25,
            weight3=15,
            notes=(
                "Se è fintech SOFTWARE puro, valuta anche "
                "Software (System & Application) come comparabile."
            ),
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.HEALTH,
        ateco_macro_primary=AtecoMacroCode.R,
        ateco_macro_primary_name="Sanità",
        ateco_macro_secondary=AtecoMacroCode.C,
        ateco_macro_secondary_name="Manifattura",
        suggested_ateco_codes=("86", "87", "88", "21"),
        damodaran_mapping=DamodaranMapping(
            industry1="Healthcare Products",
            industry2="Heathcare Information and Technology",
            industry3="Drugs (Pharmaceutical)",
            weight1=55,
            weight2=30,
            weight3=15,
            notes=(
                "Se cliniche/strutture: considera Hospitals/Healthcare Facilities; "
                "se biotech: Drugs (Biotechnology)."
            ),
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.EDUCATION,
        ateco_macro_primary=AtecoMacroCode.O,
        ateco_macro_primary_name="Supporto",
        ateco_macro_secondary=AtecoMacroCode.K,
        ateco_macro_secondary_name="ICT",
        suggested_ateco_codes=("78", "82", "62"),
        damodaran_mapping=DamodaranMapping(
            industry1="Education",
            industry2="Business & Consumer Services",
            industry3="Computer Services",
            weight1=60,
            weight2=25,
            weight3=15,
            notes="Se HR software: aumenta peso su Computer Services / Software.",
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.MEDIA,
        ateco_macro_primary=AtecoMacroCode.K,
        ateco_macro_primary_name="ICT",
        ateco_macro_secondary=AtecoMacroCode.C,
        ateco_macro_secondary_name="Manifattura",
        suggested_ateco_codes=("63", "62", "18"),
        damodaran_mapping=DamodaranMapping(
            industry1="Advertising",
            industry2="Publishing & Newspapers",
            industry3="Entertainment",
            weight1=50,
            weight2=25,
            weight3=25,
            notes="Se broadcaster: usa Broadcasting; se media digitale: Advertising + Entertainment.",
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.TOURISM,
        ateco_macro_primary=AtecoMacroCode.I,
        ateco_macro_primary_name="Alloggio/Ristorazione",
        ateco_macro_secondary=AtecoMacroCode.O,
        ateco_macro_secondary_name="Supporto",
        suggested_ateco_codes=("55", "56", "79"),
        damodaran_mapping=DamodaranMapping(
            industry1="Hotel/Gaming",
            industry2="Restaurant/Dining",
            industry3="Recreation",
            weight1=45,
            weight2=35,
            weight3=20,
            notes=(
                "Per tour operator/booking: aumenta peso su "
                "Business & Consumer Services o Travel-related (79)."
            ),
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.TRANSPORT,
        ateco_macro_primary=AtecoMacroCode.H,
        ateco_macro_primary_name="Trasporti",
        suggested_ateco_codes=("49", "50", "51", "52", "53"),
        damodaran_mapping=DamodaranMapping(
            industry1="Transportation",
            industry2="Trucking",
            industry3="Air Transport",
            weight1=55,
            weight2=25,
            weight3=20,
            notes="Se ferroviario: Transportation (Railroads); se mare: Shipbuilding & Marine.",
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.MANUFACTURING,
        ateco_macro_primary=AtecoMacroCode.C,
        ateco_macro_primary_name="Manifattura",
        suggested_ateco_codes=("24", "25", "28", "33", "27", "26"),
        damodaran_mapping=DamodaranMapping(
            industry1="Machinery",
            industry2="Electrical Equipment",
            industry3="Metals & Mining",
            weight1=50,
            weight2=30,
            weight3=20,
            notes="Se elettronica: Electronics (General); se acciaio: Steel.",
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.AGRIFOOD,
        ateco_macro_primary=AtecoMacroCode.C,
        ateco_macro_primary_name="Manifattura",
        ateco_macro_secondary=AtecoMacroCode.A,
        ateco_macro_secondary_name="Agricoltura",
        suggested_ateco_codes=("10", "11", "12", "01", "02", "03"),
        damodaran_mapping=DamodaranMapping(
            industry1="Food Processing",
            industry2="Farming/Agriculture",
            industry3="Beverage (Soft)",
            weight1=55,
            weight2=25,
            weight3=20,
            notes="Per alcolici: Beverage (Alcoholic); per wholesaler: Food Wholesalers.",
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.ENERGY,
        ateco_macro_primary=AtecoMacroCode.C,
        ateco_macro_primary_name="Manifattura",
        suggested_ateco_codes=("19",),
        damodaran_mapping=DamodaranMapping(
            industry1="Green & Renewable Energy",
            industry2="Power",
            industry3="Utility (General)",
            weight1=50,
            weight2=25,
            weight3=25,
            notes="Se oil&gas: usa Oil/Gas (Production and Exploration) / (Integrated).",
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.CONSTRUCTION,
        ateco_macro_primary=AtecoMacroCode.F,
        ateco_macro_primary_name="Costruzioni",
        ateco_macro_secondary=AtecoMacroCode.M,
        ateco_macro_secondary_name="Immobili",
        suggested_ateco_codes=("41", "42", "43", "68"),
        damodaran_mapping=DamodaranMapping(
            industry1="Engineering/Construction",
            industry2="Real Estate (General/Diversified)",
            industry3="Homebuilding",
            weight1=45,
            weight2=35,
            weight3=20,
            notes=(
                "Se immobiliare puro: aumenta peso su Real Estate e/o R.E.I.T. "
                "a seconda del modello."
            ),
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.PROFESSIONAL_SERVICES,
        ateco_macro_primary=AtecoMacroCode.O,
        ateco_macro_primary_name="Supporto",
        ateco_macro_secondary=AtecoMacroCode.K,
        ateco_macro_secondary_name="ICT",
        suggested_ateco_codes=("82", "62"),
        damodaran_mapping=DamodaranMapping(
            industry1="Business & Consumer Services",
            industry2="Office Equipment & Services",
            industry3="Information Services",
            weight1=60,
            weight2=25,
            weight3=15,
            notes=(
                "Advisory/consulenza: spesso Business & Consumer Services "
                "è il comparabile più coerente."
            ),
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.BUSINESS_SERVICES,
        ateco_macro_primary=AtecoMacroCode.O,
        ateco_macro_primary_name="Supporto",
        suggested_ateco_codes=("77", "78", "79", "80", "81", "82"),
        damodaran_mapping=DamodaranMapping(
            industry1="Business & Consumer Services",
            industry2="Environmental & Waste Services",
            industry3="Office Equipment & Services",
            weight1=60,
            weight2=25,
            weight3=15,
            notes="Se facility/cleaning: aumenta Environmental & Waste Services.",
        ),
    ),
    SectorMapping(
        onboarding_sector=OnboardingSector.OTHER,
        ateco_macro_primary=AtecoMacroCode.O,
        ateco_macro_primary_name="Supporto",
        suggested_ateco_codes=(),
        damodaran_mapping=DamodaranMapping(
            industry1="Business & Consumer Services",
            industry2="Diversified",
            industry3="Information Services",
            weight1=50,
            weight2=30,
            weight3=20,
            notes="Obbliga una descrizione e (opzionale) ATECO per migliorare la mappatura.",
        ),
    ),
)


# --- Tables ---


@dataclass(frozen=True)
class ReferenceTables:
    """
    Read-only bundle of all reference data.

    Built once and shared by reference; safe for any number of concurrent
    readers. Lookup indexes are derived on construction.
    """

    macros: tuple[AtecoMacro, ...]
    ateco_codes: tuple[Ateco2Digit, ...]
    damodaran_industries: tuple[DamodaranIndustry, ...]
    sector_mappings: tuple[SectorMapping, ...]

    ateco_by_code: Mapping[str, Ateco2Digit] = field(init=False, repr=False, compare=False)
    mapping_by_sector: Mapping[OnboardingSector, SectorMapping] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "ateco_by_code",
            MappingProxyType({entry.code: entry for entry in self.ateco_codes}),
        )
        object.__setattr__(
            self,
            "mapping_by_sector",
            MappingProxyType({m.onboarding_sector: m for m in self.sector_mappings}),
        )

    def get_statistics(self) -> dict[str, int]:
        """Row counts, used by health checks and startup logging."""
        return {
            "ateco_macros": len(self.macros),
            "ateco_codes": len(self.ateco_codes),
            "damodaran_industries": len(self.damodaran_industries),
            "sector_mappings": len(self.sector_mappings),
        }

    def validate(self) -> None:
        """
        Check the invariants of the tables.

        Raises:
            ReferenceDataError: On the first violated invariant
        """
        duplicates = sorted(
            code for code, count in Counter(e.code for e in self.ateco_codes).items() if count > 1
        )
        if duplicates:
            raise ReferenceDataError(
                f"Duplicate ATECO codes: {', '.join(duplicates)}",
                table="ateco_codes",
                details={"codes": duplicates},
            )

        sector_counts = Counter(m.onboarding_sector for m in self.sector_mappings)
        repeated = sorted(s.value for s, count in sector_counts.items() if count > 1)
        if repeated:
            raise ReferenceDataError(
                f"Onboarding sectors mapped more than once: {', '.join(repeated)}",
                table="sector_mappings",
                details={"sectors": repeated},
            )

        missing = [s.value for s in OnboardingSector if s not in sector_counts]
        if missing:
            raise ReferenceDataError(
                f"Onboarding sectors without a mapping: {', '.join(missing)}",
                table="sector_mappings",
                details={"sectors": missing},
            )

        known_industries = set(self.damodaran_industries)
        for mapping in self.sector_mappings:
            sector = mapping.onboarding_sector.value
            damodaran = mapping.damodaran_mapping

            if damodaran.total_weight != 100:
                raise ReferenceDataError(
                    f"Weights for '{sector}' sum to {damodaran.total_weight}, expected 100",
                    table="sector_mappings",
                    details={"sector": sector, "total_weight": damodaran.total_weight},
                )

            unknown = [i for i in damodaran.industries if i not in known_industries]
            if unknown:
                raise ReferenceDataError(
                    f"Unknown Damodaran industries for '{sector}': {', '.join(unknown)}",
                    table="sector_mappings",
                    details={"sector": sector, "industries": unknown},
                )

            unknown_codes = [c for c in mapping.suggested_ateco_codes if c not in self.ateco_by_code]
            if unknown_codes:
                raise ReferenceDataError(
                    f"Unknown suggested ATECO codes for '{sector}': {', '.join(unknown_codes)}",
                    table="sector_mappings",
                    details={"sector": sector, "codes": unknown_codes},
                )


def expand_ateco_codes(
    macros: Iterable[AtecoMacro], descriptions: Mapping[str, str]
) -> tuple[Ateco2Digit, ...]:
    """
    Flatten macro groups into 2-digit catalog rows, in declaration order.

    Codes without a catalogued description fall back to the macro name.
    """
    return tuple(
        Ateco2Digit(
            code=code,
            macro_code=macro.code,
            macro_name=macro.name,
            description=descriptions.get(code, macro.name),
        )
        for macro in macros
        for code in macro.digit_codes
    )


def build_reference_tables(
    macros: Iterable[AtecoMacro] = ATECO_MACROS,
    descriptions: Mapping[str, str] = ATECO_CODE_DESCRIPTIONS,
    damodaran_industries: Iterable[DamodaranIndustry] = DAMODARAN_INDUSTRIES,
    sector_mappings: Iterable[SectorMapping] = SECTOR_MAPPINGS,
    validate: bool = True,
) -> ReferenceTables:
    """
    Assemble (and by default validate) a ReferenceTables instance.

    Arguments default to the embedded data; tests pass their own rows.

    Raises:
        ReferenceDataError: If validation is enabled and an invariant fails
    """
    macros = tuple(macros)
    tables = ReferenceTables(
        macros=macros,
        ateco_codes=expand_ateco_codes(macros, descriptions),
        damodaran_industries=tuple(damodaran_industries),
        sector_mappings=tuple(sector_mappings),
    )

    if validate:
        tables.validate()

    logger.debug(f"Reference tables built: {tables.get_statistics()}")
    return tables


@lru_cache(maxsize=1)
def get_reference_tables() -> ReferenceTables:
    """
    Get the process-wide reference tables.

    Built and validated on first call; every later call returns the same
    instance.
    """
    return build_reference_tables()
