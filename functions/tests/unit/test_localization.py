"""Unit tests for localization and currency formatting."""

import pytest

from services.localization import (
    Localizer,
    format_currency,
    normalize_currency,
    normalize_language,
    translate,
)


class TestTranslate:

    def test_english_default(self):
        assert translate("no_image") == "[No image available]"

    def test_spanish(self):
        assert translate("no_image", "spanish") == "[Imagen no disponible]"

    def test_iso_code_alias(self):
        assert translate("no_image", "es") == translate("no_image", "spanish")

    def test_unknown_language_falls_back_to_english(self):
        assert translate("no_image", "klingon") == "[No image available]"

    def test_unknown_key_returns_key(self):
        assert translate("definitely_not_a_key", "french") == "definitely_not_a_key"

    def test_normalize_language(self):
        assert normalize_language(None) == "english"
        assert normalize_language(" FR ") == "french"


class TestFormatCurrency:

    @pytest.mark.parametrize("amount,currency,expected", [
        (117300, "USD", "$117,300"),
        (1234.5, "EUR", "€1,234.50"),
        (1234.4, "JPY", "¥1,234"),
        (-250, "GBP", "-£250"),
        (0, None, "$0"),
    ])
    def test_format(self, amount, currency, expected):
        assert format_currency(amount, currency) == expected

    def test_unknown_currency_falls_back_to_usd(self):
        assert normalize_currency("XYZ") == "USD"
        assert format_currency(10, "xyz") == "$10"


class TestLocalizer:

    def test_for_preferences_defaults(self):
        localizer = Localizer.for_preferences(None, None)

        assert localizer.language == "english"
        assert localizer.currency == "USD"

    def test_placeholders_are_filled(self):
        localizer = Localizer.for_preferences("english", "EUR")

        assert "3" in localizer.t("photo_title_contractor", n=3)
        assert localizer.money(99) == "€99"
