import json
import tempfile
import unittest
from pathlib import Path

from rocket_anchor.errors import ConfigError
from rocket_anchor.plans import CallSpec, find_seed_file, load_plans, parse_plans

_COUNTER_TOML = """
[[plans]]
program = "counter"

[plans.initialize]
function = "initialize"
args = [0]

[plans.initialize.accounts]
counter = "pda:counter"
authority = "signer"
systemProgram = "systemProgram"

[[plans.seeds]]
function = "increment"
args = []
repeat = 5

[plans.seeds.accounts]
counter = "pda:counter"
authority = "signer"
""".lstrip()


class LoadPlansTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name)

    def _write(self, rel: str, text: str) -> Path:
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    def test_toml_document(self) -> None:
        self._write("seeds/index.toml", _COUNTER_TOML)
        plans = load_plans(self.root)
        self.assertEqual(len(plans), 1)
        plan = plans[0]
        self.assertEqual(plan.program, "counter")
        self.assertEqual(
            plan.initialize,
            CallSpec(
                function="initialize",
                accounts={"counter": "pda:counter", "authority": "signer", "systemProgram": "systemProgram"},
                args=[0],
            ),
        )
        self.assertEqual(plan.seeds[0].repeat, 5)
        self.assertEqual(plan.call_count, 6)

    def test_search_order_prefers_seeds_index(self) -> None:
        self._write("scripts/seed.json", json.dumps([{"program": "from-scripts"}]))
        self._write("seeds/index.toml", '[[plans]]\nprogram = "from-seeds"\n')
        self.assertEqual(find_seed_file(self.root), self.root / "seeds/index.toml")
        self.assertEqual(load_plans(self.root)[0].program, "from-seeds")

    def test_explicit_seed_file_relative_to_root(self) -> None:
        self._write("custom/plan.json", json.dumps({"program": "solo", "seeds": [{"function": "go"}]}))
        plans = load_plans(self.root, "custom/plan.json")
        self.assertEqual(plans[0].program, "solo")
        self.assertEqual(plans[0].seeds, [CallSpec(function="go")])

    def test_missing_explicit_seed_file(self) -> None:
        with self.assertRaisesRegex(ConfigError, "Seed file not found"):
            load_plans(self.root, "nope.toml")

    def test_no_seed_document(self) -> None:
        with self.assertRaisesRegex(ConfigError, "No seed configuration found"):
            load_plans(self.root)

    def test_malformed_document(self) -> None:
        self._write("seeds/index.json", "{not json")
        with self.assertRaisesRegex(ConfigError, "Failed to parse seed file"):
            load_plans(self.root)


class ParsePlansTests(unittest.TestCase):
    def test_accepts_list_object_and_plans_key(self) -> None:
        single = {"program": "a"}
        self.assertEqual(len(parse_plans(single)), 1)
        self.assertEqual(len(parse_plans([single, {"program": "b"}])), 2)
        self.assertEqual(len(parse_plans({"plans": [single]})), 1)

    def test_plan_without_calls_is_valid(self) -> None:
        plan = parse_plans({"program": "a"})[0]
        self.assertIsNone(plan.initialize)
        self.assertEqual(plan.seeds, [])
        self.assertEqual(plan.call_count, 0)

    def test_rejects_invalid_repeat(self) -> None:
        for repeat in (0, -2, True, "3"):
            with self.assertRaisesRegex(ConfigError, r"plans\[0\]\.seeds\[0\]\.repeat"):
                parse_plans({"program": "a", "seeds": [{"function": "f", "repeat": repeat}]})

    def test_rejects_repeat_on_initialize(self) -> None:
        with self.assertRaisesRegex(ConfigError, "initialize"):
            parse_plans({"program": "a", "initialize": {"function": "init", "repeat": 2}})

    def test_rejects_missing_fields(self) -> None:
        with self.assertRaisesRegex(ConfigError, r"plans\[1\]\.program"):
            parse_plans([{"program": "a"}, {"seeds": []}])
        with self.assertRaisesRegex(ConfigError, "function"):
            parse_plans({"program": "a", "seeds": [{"accounts": {}}]})
        with self.assertRaisesRegex(ConfigError, "args must be a list"):
            parse_plans({"program": "a", "seeds": [{"function": "f", "args": "x"}]})
        with self.assertRaisesRegex(ConfigError, "accounts must be a table"):
            parse_plans({"program": "a", "seeds": [{"function": "f", "accounts": ["x"]}]})

    def test_rejects_non_plan_document(self) -> None:
        with self.assertRaises(ConfigError):
            parse_plans("counter")


if __name__ == "__main__":
    unittest.main()
