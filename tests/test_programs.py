import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from solders.keypair import Keypair

from rocket_anchor.errors import ConfigError
from rocket_anchor.programs import find_programs, load_idl, open_program, program_id_for


class FindProgramsTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.artifacts = Path(tmp.name)
        self.deploy = self.artifacts / "deploy"
        self.deploy.mkdir()
        (self.artifacts / "idl").mkdir()
        self.keypair = Keypair()

    def _add_program(self, name: str, keypair: bool = True, idl: bool = False) -> None:
        (self.deploy / f"{name}.so").write_bytes(b"\x7fELF")
        if keypair:
            (self.deploy / f"{name}-keypair.json").write_text(json.dumps(list(bytes(self.keypair))))
        if idl:
            (self.artifacts / "idl" / f"{name}.json").write_text("{}")

    def test_finds_programs_with_keypairs(self) -> None:
        self._add_program("counter", idl=True)
        self._add_program("vault")
        programs = find_programs(self.artifacts)
        self.assertEqual([p.name for p in programs], ["counter", "vault"])
        self.assertEqual(programs[0].idl_path, self.artifacts / "idl" / "counter.json")
        self.assertIsNone(programs[1].idl_path)
        self.assertEqual(programs[0].program_id, self.keypair.pubkey())

    def test_skips_program_without_keypair(self) -> None:
        self._add_program("counter")
        self._add_program("orphan", keypair=False)
        messages = []
        programs = find_programs(self.artifacts, on_progress=lambda msg, pct: messages.append(msg))
        self.assertEqual([p.name for p in programs], ["counter"])
        self.assertTrue(any("orphan" in msg for msg in messages))

    def test_filter_by_name(self) -> None:
        self._add_program("counter")
        self._add_program("vault")
        self.assertEqual([p.name for p in find_programs(self.artifacts, "vault")], ["vault"])
        with self.assertRaisesRegex(ConfigError, 'Program "missing" not found'):
            find_programs(self.artifacts, "missing")

    def test_empty_deploy_dir(self) -> None:
        with self.assertRaisesRegex(ConfigError, "No programs found"):
            find_programs(self.artifacts)

    def test_missing_deploy_dir(self) -> None:
        with self.assertRaisesRegex(ConfigError, "Deploy directory not found"):
            find_programs(self.artifacts / "nowhere")

    def test_missing_idl(self) -> None:
        with self.assertRaisesRegex(ConfigError, "IDL not found for counter"):
            load_idl(self.artifacts, "counter")

    def test_program_id_from_deploy_keypair(self) -> None:
        self._add_program("counter")
        self.assertEqual(program_id_for(self.artifacts, "counter"), self.keypair.pubkey())

    def test_open_program_builds_anchorpy_program(self) -> None:
        self._add_program("counter", idl=True)
        provider = Mock()
        with patch("rocket_anchor.programs.Idl") as idl_cls, patch("rocket_anchor.programs.Program") as program_cls:
            open_program(self.artifacts, "counter", provider)
        idl_cls.from_json.assert_called_once_with("{}")
        program_cls.assert_called_once_with(idl_cls.from_json.return_value, self.keypair.pubkey(), provider)


if __name__ == "__main__":
    unittest.main()
