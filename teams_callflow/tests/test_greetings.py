import unittest

from teams_callflow.builders.greetings import (
    GreetingFormatter,
    GreetingOptions,
    format_greeting,
    greeting_from_parts,
    greeting_from_prompt,
    truncate_filename,
    truncate_text,
)
from teams_callflow.models.callflow import AudioFileGreeting, NoGreeting, TextToSpeechGreeting
from teams_callflow.models.tenant import Prompt
from teams_callflow.tests.fixtures import audio


class TruncationTests(unittest.TestCase):
    def test_text_is_cut_to_limit_including_ellipsis(self) -> None:
        self.assertEqual(truncate_text("Hello World", 5), "Hell…")
        self.assertEqual(len(truncate_text("Hello World", 5)), 5)

    def test_short_text_is_unchanged(self) -> None:
        self.assertEqual(truncate_text("Hi", 5), "Hi")

    def test_filename_keeps_extension(self) -> None:
        self.assertEqual(truncate_filename("company_welcome_greeting.wav", 10), "company_w….wav")

    def test_filename_with_short_stem_is_unchanged(self) -> None:
        self.assertEqual(truncate_filename("intro.mp3", 20), "intro.mp3")
        self.assertEqual(truncate_filename("abcd.wav", 5), "abcd.wav")
        self.assertLessEqual(len(truncate_filename("abcdef.wav", 5)), 5 + 4)


class FormatGreetingTests(unittest.TestCase):
    def test_no_greeting_label(self) -> None:
        label, export = format_greeting(NoGreeting(), GreetingOptions(show_text=True, export_assets=True))
        self.assertEqual(label, "None")
        self.assertIsNone(export)

    def test_text_greeting_truncated_but_export_keeps_full_text(self) -> None:
        options = GreetingOptions(show_text=True, truncate_at=5, export_assets=True)
        label, export = format_greeting(TextToSpeechGreeting("Hello World"), options, "aa1", "defaultGreeting")
        self.assertEqual(label, "Hell…")
        self.assertIsNotNone(export)
        self.assertEqual(export.content, "Hello World")
        self.assertEqual(export.key, "aa1_defaultGreeting")

    def test_text_hidden_by_default(self) -> None:
        label, export = format_greeting(TextToSpeechGreeting("Hello World"), GreetingOptions())
        self.assertEqual(label, "Text To Speech")
        self.assertIsNone(export)

    def test_audio_export_needs_download_uri(self) -> None:
        options = GreetingOptions(show_filename=True, export_assets=True)
        label, export = format_greeting(AudioFileGreeting("hold.mp3"), options, "cq1", "cqGreeting")
        self.assertEqual(label, "hold.mp3")
        self.assertIsNone(export)

        label, export = format_greeting(
            AudioFileGreeting("hold.mp3", "https://files.example/hold.mp3"), options, "cq1", "cqGreeting", 2
        )
        self.assertEqual(export.kind, "audio")
        self.assertEqual(export.key, "cq1_cqGreeting_2")
        self.assertEqual(export.filename, "hold.mp3")

    def test_formatter_link_points_into_assets_dir(self) -> None:
        formatter = GreetingFormatter(GreetingOptions(export_assets=True), assets_dir="out")
        _label, export = formatter.format(TextToSpeechGreeting("Welcome"), "aa1", "holidayGreeting", 1)
        self.assertTrue(formatter.link_for(export).endswith("aa1_holidayGreeting_1.txt"))


class GreetingSourceTests(unittest.TestCase):
    def test_prompt_active_type_selects_greeting(self) -> None:
        prompt = Prompt.model_validate({"ActiveType": "TextToSpeech", "TextToSpeechPrompt": "Hi"})
        self.assertEqual(greeting_from_prompt(prompt), TextToSpeechGreeting("Hi"))
        self.assertEqual(greeting_from_prompt(Prompt.model_validate({"ActiveType": "None"})), NoGreeting())
        self.assertEqual(greeting_from_prompt(None), NoGreeting())

    def test_audio_prompt_keeps_download_uri(self) -> None:
        prompt = Prompt.model_validate(audio("hold.wav", "https://files.example/hold.wav"))
        self.assertEqual(greeting_from_prompt(prompt), AudioFileGreeting("hold.wav", "https://files.example/hold.wav"))

    def test_audio_wins_over_text(self) -> None:
        greeting = greeting_from_parts(text="Hello", filename="welcome.wav")
        self.assertIsInstance(greeting, AudioFileGreeting)
        self.assertEqual(greeting_from_parts(), NoGreeting())


if __name__ == "__main__":
    unittest.main()
