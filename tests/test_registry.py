"""Tests for the rule registry."""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from species_counterpoint.registry import (
    ALL_RULE_CLASSES,
    CATEGORY_MAP,
    CATEGORY_ORDER,
    RuleRegistry,
    build_default_registry,
    get_rules,
)
from species_counterpoint.rules.base import Category, Rule, Severity, SpeciesRule
from species_counterpoint.rules.intervals import Consonance
from species_counterpoint.rules.motion import NoParallelFifths


class TestDefaultRegistry(unittest.TestCase):
    def setUp(self):
        self.registry = build_default_registry()

    def test_rule_count(self):
        self.assertEqual(len(ALL_RULE_CLASSES), 53)
        self.assertEqual(len(self.registry), 53)

    def test_ids_unique(self):
        ids = [r.rule_id for r in self.registry]
        self.assertEqual(len(ids), len(set(ids)))

    def test_every_rule_is_complete(self):
        for rule in self.registry:
            self.assertIsInstance(rule, Rule)
            self.assertTrue(rule.rule_id)
            self.assertTrue(rule.name)
            self.assertTrue(rule.description, rule.rule_id)
            self.assertTrue(rule.explanation, rule.rule_id)
            self.assertTrue(rule.species, rule.rule_id)
            self.assertIsInstance(rule.severity, Severity)

    def test_rule_without_check_is_not_a_rule(self):
        class Unfinished(SpeciesRule):
            rule_id = "test-unfinished"
            name = "No check"

        self.assertNotIsInstance(Unfinished(), Rule)

    def test_for_species(self):
        first = self.registry.for_species(1)
        self.assertEqual(len(first), 30)
        ids = {r.rule_id for r in first}
        self.assertIn("species1-consonance", ids)
        self.assertNotIn("s2s3s5-downbeat-consonance", ids)
        fourth = {r.rule_id for r in self.registry.for_species(4)}
        self.assertIn("s4-cadential-suspension", fourth)
        self.assertNotIn("s2-passing-tone", fourth)

    def test_for_species_keeps_order(self):
        all_ids = [r.rule_id for r in self.registry]
        ids = [r.rule_id for r in self.registry.for_species(3)]
        self.assertEqual(ids, sorted(ids, key=all_ids.index))

    def test_get(self):
        rule = self.registry.get("species1-no-parallel-fifths")
        self.assertIsInstance(rule, NoParallelFifths)
        self.assertIsNone(self.registry.get("no-such-rule"))

    def test_grouped_by_category(self):
        groups = self.registry.grouped_by_category()
        self.assertEqual([info.category for info, _ in groups], list(CATEGORY_ORDER))
        self.assertEqual(sum(len(rules) for _, rules in groups), 53)
        self.assertEqual(groups[-1][0].label, "Voice Crossing & Spacing")

    def test_grouped_skips_empty_categories(self):
        groups = self.registry.grouped_by_category(1)
        self.assertNotIn(Category.DISSONANCE, [info.category for info, _ in groups])


class TestRegistryConstruction(unittest.TestCase):
    def test_duplicate_id_rejected(self):
        with self.assertRaises(ValueError):
            RuleRegistry([Consonance(), Consonance()])

    def test_custom_registry(self):
        registry = RuleRegistry([NoParallelFifths()])
        self.assertEqual(len(registry), 1)
        self.assertEqual(registry.for_species(2), registry.all())


class TestGetRules(unittest.TestCase):
    def test_all(self):
        self.assertEqual(len(get_rules()), 53)

    def test_filter_by_category(self):
        rules = get_rules({"cadence"})
        self.assertEqual(len(rules), len(CATEGORY_MAP["cadence"]))
        self.assertTrue(all(r.category == Category.CADENCE for r in rules))

    def test_order_follows_registration(self):
        rules = get_rules({"voiceCrossing", "intervals"})
        self.assertEqual(rules[0].category, Category.INTERVALS)
        self.assertEqual(rules[-1].category, Category.VOICE_CROSSING)

    def test_unknown_category(self):
        with self.assertRaises(ValueError):
            get_rules({"harmony"})

    def test_registry_from_categories(self):
        registry = build_default_registry({"motion"})
        self.assertEqual(len(registry), 10)


if __name__ == "__main__":
    unittest.main()
