import unittest

from trello_semantic.core.similarity import (
    fuzzy_match,
    levenshtein_distance,
    rank_candidates,
    similarity_score,
)


class TestLevenshtein(unittest.TestCase):
    def test_known_distances(self):
        self.assertEqual(levenshtein_distance("kitten", "sitting"), 3)
        self.assertEqual(levenshtein_distance("marketing", "markting"), 1)
        self.assertEqual(levenshtein_distance("", "abc"), 3)
        self.assertEqual(levenshtein_distance("abc", ""), 3)
        self.assertEqual(levenshtein_distance("same", "same"), 0)


class TestSimilarityScore(unittest.TestCase):
    def test_identical_strings_score_one(self):
        for value in ["", "a", "Marketing", "  To Do  ", "Ünïcödé board"]:
            self.assertEqual(similarity_score(value, value), 1.0)

    def test_case_and_whitespace_insensitive(self):
        self.assertEqual(similarity_score("  Marketing ", "marketing"), 1.0)

    def test_one_typo_in_nine_letters(self):
        score = similarity_score("Markting", "Marketing")
        self.assertAlmostEqual(score, 1 - 1 / 9)
        self.assertGreater(score, 0.8)

    def test_completely_different(self):
        self.assertEqual(similarity_score("abc", "xyz"), 0.0)


class TestFuzzyMatch(unittest.TestCase):
    def test_no_candidates(self):
        self.assertIsNone(fuzzy_match("anything", []))

    def test_clear_winner(self):
        match = fuzzy_match("Markting", ["Marketing", "Engineering"])
        self.assertIsNotNone(match)
        self.assertEqual(match.candidate, "Marketing")

    def test_near_tie_is_ambiguous(self):
        self.assertIsNone(fuzzy_match("Project Alph", ["Project Alpha", "Project Alphb"]))

    def test_tie_is_ambiguous_even_with_low_scores(self):
        self.assertIsNone(fuzzy_match("xyz", ["abc", "abd"]))

    def test_custom_gap(self):
        # 0.75 vs 0.5 -> gap 0.25
        self.assertIsNotNone(fuzzy_match("abcd", ["abcx", "abxx"], ambiguity_gap=0.2))
        self.assertIsNone(fuzzy_match("abcd", ["abcx", "abxx"], ambiguity_gap=0.3))

    def test_rank_is_descending_and_stable(self):
        ranked = rank_candidates("dev", ["Done", "Dev", "Devs", "Dev"])
        self.assertEqual(ranked[0].candidate, "Dev")
        self.assertEqual(ranked[1].candidate, "Dev")
        self.assertEqual([m.candidate for m in ranked][2], "Devs")
        scores = [m.score for m in ranked]
        self.assertEqual(scores, sorted(scores, reverse=True))


if __name__ == "__main__":
    unittest.main()
