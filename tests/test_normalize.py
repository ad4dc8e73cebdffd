"""Tests for normalization utilities."""

from utils.normalize import slug_folder, slug_kebab, strip_html, clean_field, first_component


class TestSlugs:
    """Test folder and URL slugs."""

    def test_slug_folder(self):
        assert slug_folder("Swartberg Wilds!") == "swartberg_wilds"
        assert slug_folder("  De Hoek -- Camp ") == "de_hoek_camp"

    def test_slug_kebab(self):
        assert slug_kebab("De Hoek Camp & Caravan") == "de-hoek-camp-caravan"
        assert slug_kebab("!Khwa ttu") == "khwa-ttu"

    def test_empty_names(self):
        assert slug_folder(None) == ""
        assert slug_kebab("") == ""


class TestFieldCleaning:
    """Test attribution and contact field cleaning."""

    def test_strip_html(self):
        html = '<a href="https://maps.google.com/maps/contrib/1">Jane Doe</a>'
        assert strip_html(html) == "Jane Doe"
        assert strip_html(None) == ""

    def test_clean_field(self):
        assert clean_field("  ") is None
        assert clean_field(None) is None
        assert clean_field(" https://example.com ") == "https://example.com"


class TestFirstComponent:
    """Test Google address component lookup."""

    def test_finds_component_by_type(self, sample_google_result):
        components = sample_google_result["address_components"]

        assert first_component(components, "locality")["long_name"] == "Prince Albert"
        assert first_component(components, "country") is None
        assert first_component(None, "locality") is None
