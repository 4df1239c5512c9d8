import os
import sys
import unittest
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from localization import Translator


class TranslatorTest(unittest.TestCase):
    def test_default_language_returns_key(self) -> None:
        self.assertEqual(Translator().gettext("儲存修改"), "儲存修改")

    def test_english(self) -> None:
        translator = Translator()
        translator.set_language("en")
        self.assertEqual(translator.gettext("儲存修改"), "Save changes")
        self.assertEqual(translator.gettext("沒有翻譯"), "沒有翻譯")

    def test_unknown_language_falls_back(self) -> None:
        translator = Translator()
        translator.set_language("fr")
        self.assertEqual(translator.gettext("刪除"), "刪除")


if __name__ == "__main__":
    unittest.main()
