import unittest

from app.core.i18n import Translator, resolve_locale


class LocaleResolutionTests(unittest.TestCase):
    def test_defaults_to_english(self):
        self.assertEqual(resolve_locale(None), "en")
        self.assertEqual(resolve_locale(""), "en")
        self.assertEqual(resolve_locale("fr-FR,de;q=0.5"), "en")

    def test_picks_highest_quality_supported_language(self):
        self.assertEqual(resolve_locale("es"), "es")
        self.assertEqual(resolve_locale("fr;q=0.9,es-MX;q=0.8,en;q=0.7"), "es")
        self.assertEqual(resolve_locale("en;q=0.4,es;q=0.6"), "es")

    def test_zero_quality_is_ignored(self):
        self.assertEqual(resolve_locale("es;q=0,en;q=0.1"), "en")


class TranslatorTests(unittest.TestCase):
    def test_translates_and_interpolates(self):
        translator = Translator("es")
        self.assertEqual(translator.t("noProductsFound"), "No se encontraron productos")
        self.assertEqual(translator.t("unknownFilterField", field="size"), "Campo de filtro desconocido: size")

    def test_missing_key_falls_back_to_key(self):
        self.assertEqual(Translator("en").t("somethingElse"), "somethingElse")

    def test_unsupported_locale_uses_default(self):
        self.assertEqual(Translator("de").locale, "en")

    def test_each_translator_is_independent(self):
        english, spanish = Translator("en"), Translator("es")
        self.assertEqual(english.t("notFound"), "Resource not found")
        self.assertEqual(spanish.t("notFound"), "Recurso no encontrado")


if __name__ == "__main__":
    unittest.main()
