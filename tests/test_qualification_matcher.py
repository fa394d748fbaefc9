import json
import os
import tempfile
import unittest

from app.services.qualification_matcher import (
    QualificationLevel,
    QualificationMatcher,
    load_alias_table,
)


class NormalizeTests(unittest.TestCase):
    def setUp(self):
        self.matcher = QualificationMatcher()

    def test_common_degree_spellings(self):
        cases = {
            "B.Tech": QualificationLevel.BACHELORS,
            "Bachelor's degree": QualificationLevel.BACHELORS,
            "BSc Computer Science": QualificationLevel.BACHELORS,
            "Undergraduate": QualificationLevel.BACHELORS,
            "Master of Science": QualificationLevel.MASTERS,
            "M.Sc. Computer Science": QualificationLevel.MASTERS,
            "MBA": QualificationLevel.MASTERS,
            "Postgraduate": QualificationLevel.MASTERS,
            "Post Graduate": QualificationLevel.MASTERS,
            "Post-Graduation in Commerce": QualificationLevel.MASTERS,
            "Graduate": QualificationLevel.BACHELORS,
            "Graduation": QualificationLevel.BACHELORS,
            "Any Graduate": QualificationLevel.BACHELORS,
            "PhD in Physics": QualificationLevel.PHD,
            "Doctor of Philosophy": QualificationLevel.PHD,
            "Diploma in Mechanical Engineering": QualificationLevel.DIPLOMA,
            "Higher Secondary (12th)": QualificationLevel.HIGH_SCHOOL,
            "High School": QualificationLevel.HIGH_SCHOOL,
            "Associate Degree": QualificationLevel.ASSOCIATE,
        }
        for text, expected in cases.items():
            with self.subTest(text=text):
                self.assertEqual(self.matcher.normalize(text), expected)

    def test_short_aliases_do_not_match_inside_words(self):
        # "ba" inside "mba" or "basket", "ma" inside "diploma"
        self.assertEqual(self.matcher.normalize("MBA"), QualificationLevel.MASTERS)
        self.assertIsNone(self.matcher.normalize("Basket weaving"))
        self.assertEqual(self.matcher.normalize("Diploma"), QualificationLevel.DIPLOMA)

    def test_unrecognized_and_empty(self):
        self.assertIsNone(self.matcher.normalize(""))
        self.assertIsNone(self.matcher.normalize(None))
        self.assertIsNone(self.matcher.normalize("Any"))
        self.assertIsNone(self.matcher.normalize("   "))

    def test_levels_are_ordered(self):
        ranks = [level.rank for level in QualificationLevel]
        self.assertEqual(ranks, sorted(ranks))
        self.assertLess(QualificationLevel.DIPLOMA.rank, QualificationLevel.BACHELORS.rank)
        self.assertLess(QualificationLevel.MASTERS.rank, QualificationLevel.PHD.rank)


class EligibilityTests(unittest.TestCase):
    def setUp(self):
        self.matcher = QualificationMatcher()

    def test_unrecognized_requirement_never_blocks(self):
        result = self.matcher.check_eligibility("Any relevant experience", [])
        self.assertTrue(result.eligible)
        self.assertIn("not recognized", result.message)

    def test_no_records(self):
        result = self.matcher.check_eligibility("Bachelors", [])
        self.assertFalse(result.eligible)
        self.assertIn("No education records found", result.message)
        self.assertIn("Bachelors", result.message)

    def test_no_recognized_records(self):
        result = self.matcher.check_eligibility("Bachelors", ["Basket weaving", None, ""])
        self.assertFalse(result.eligible)
        self.assertIn("None of your qualifications are recognized", result.message)

    def test_higher_qualification_is_eligible(self):
        result = self.matcher.check_eligibility("Diploma", ["B.Tech"])
        self.assertTrue(result.eligible)
        self.assertIn("B.Tech", result.message)
        self.assertIn("Diploma", result.message)

    def test_equal_level_is_eligible(self):
        result = self.matcher.check_eligibility("Bachelor's degree", ["Bachelor of Science"])
        self.assertTrue(result.eligible)

    def test_graduate_counts_as_bachelors(self):
        self.assertTrue(self.matcher.check_eligibility("Bachelor's degree", ["Graduate"]).eligible)
        self.assertFalse(self.matcher.check_eligibility("Any Graduate", ["12th"]).eligible)
        self.assertTrue(self.matcher.check_eligibility("Graduation", ["Post Graduate"]).eligible)

    def test_lower_qualification_is_rejected_with_best_record(self):
        result = self.matcher.check_eligibility("Bachelors", ["12th", "Diploma in Civil Engineering"])
        self.assertFalse(result.eligible)
        self.assertEqual(
            result.message,
            "You are not eligible. Required: Bachelors, but your highest qualification is: "
            "Diploma in Civil Engineering",
        )

    def test_unrecognized_records_are_ignored_when_one_qualifies(self):
        result = self.matcher.check_eligibility("Bachelors", ["Basket weaving", "M.Tech", "Cooking class"])
        self.assertTrue(result.eligible)


class AliasTableTests(unittest.TestCase):
    def test_injected_table_replaces_defaults(self):
        matcher = QualificationMatcher({
            QualificationLevel.BACHELORS: ["licenciatura"],
            QualificationLevel.MASTERS: ["mestrado"],
        })
        self.assertEqual(matcher.normalize("Licenciatura em Direito"), QualificationLevel.BACHELORS)
        self.assertEqual(matcher.normalize("Mestrado"), QualificationLevel.MASTERS)
        self.assertIsNone(matcher.normalize("B.Tech"))
        self.assertTrue(matcher.check_eligibility("Licenciatura", ["Mestrado"]).eligible)

    def test_load_alias_table_from_json(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "aliases.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"bachelors": ["grado"], "phd": ["doctorado"]}, f)

            table = load_alias_table(path)

        self.assertEqual(table[QualificationLevel.BACHELORS], ["grado"])
        matcher = QualificationMatcher(table)
        self.assertEqual(matcher.normalize("Doctorado en Fisica"), QualificationLevel.PHD)

    def test_load_alias_table_rejects_unknown_level(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "aliases.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"kindergarten": ["kg"]}, f)

            with self.assertRaises(ValueError):
                load_alias_table(path)


if __name__ == "__main__":
    unittest.main()
