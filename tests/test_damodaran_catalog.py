"""
Tests for Damodaran industry listing.
"""

from sector_mapping_server.core.damodaran_catalog import (
    get_damodaran_catalog,
    get_damodaran_industries,
)
from sector_mapping_server.core.reference_data import DAMODARAN_INDUSTRIES


class TestGetDamodaranIndustries:
    """Tests for the union of mapped industries."""

    def test_union_of_mapped_industries(self, tables):
        """Exactly the industries referenced by some mapping."""
        expected = {
            industry
            for mapping in tables.sector_mappings
            for industry in mapping.damodaran_mapping.industries
        }
        industries = get_damodaran_industries(tables)

        assert set(industries) == expected
        assert len(industries) == len(expected)

    def test_no_duplicates(self, tables):
        """Industries shared by several sectors appear once."""
        industries = get_damodaran_industries(tables)
        assert industries.count("Business & Consumer Services") == 1
        assert industries.count("Information Services") == 1

    def test_sorted(self, tables):
        """Presentation order is alphabetical."""
        industries = get_damodaran_industries(tables)
        assert industries == sorted(industries)

    def test_excludes_unmapped(self, sample_tables):
        """Catalogued but unmapped industries are not listed."""
        assert "Unused Industry" not in get_damodaran_industries(sample_tables)


class TestGetDamodaranCatalog:
    """Tests for the full catalog."""

    def test_full_catalog(self, tables):
        """All 94 industries in source order."""
        catalog = get_damodaran_catalog(tables)
        assert len(catalog) == 94
        assert catalog == list(DAMODARAN_INDUSTRIES)

    def test_catalog_includes_unmapped(self, sample_tables):
        """The catalog lists unmapped industries too."""
        assert "Unused Industry" in get_damodaran_catalog(sample_tables)
