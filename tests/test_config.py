from __future__ import annotations

import unittest

from ultimate_ttt.board import DEFAULT_MOVE_LIMIT
from ultimate_ttt.config import Settings


class SettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = Settings.from_env({})
        self.assertEqual(settings.move_limit, DEFAULT_MOVE_LIMIT)
        self.assertEqual(settings.difficulty, "medium")
        self.assertEqual(settings.depths, {"easy": 1, "medium": 2, "hard": 3})
        self.assertEqual(settings.easy_random_rate, 0.7)

    def test_environment_overrides(self) -> None:
        settings = Settings.from_env({
            "UTTT_MOVE_LIMIT": "none",
            "UTTT_DIFFICULTY": "Hard",
            "UTTT_DEPTH_HARD": "4",
            "UTTT_EASY_RANDOM_RATE": "0.25",
        })
        self.assertIsNone(settings.move_limit)
        self.assertEqual(settings.difficulty, "hard")
        self.assertEqual(settings.depths["hard"], 4)
        self.assertEqual(settings.easy_random_rate, 0.25)
        self.assertEqual(Settings.from_env({"UTTT_MOVE_LIMIT": "150"}).move_limit, 150)

    def test_rejects_bad_values(self) -> None:
        for env in ({"UTTT_DIFFICULTY": "brutal"}, {"UTTT_DEPTH_EASY": "0"},
                    {"UTTT_EASY_RANDOM_RATE": "1.5"}, {"UTTT_MOVE_LIMIT": "-3"}):
            with self.assertRaises(ValueError):
                Settings.from_env(env)


if __name__ == "__main__":
    unittest.main()
