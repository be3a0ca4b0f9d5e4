import unittest

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from rocket_anchor.errors import ResolutionError
from rocket_anchor.pda import derive_address, seed_list, split_fragments

PROGRAM_ID = Pubkey.new_unique()


def _find(seeds, program_id=PROGRAM_ID) -> Pubkey:
    return Pubkey.find_program_address(seeds, program_id)[0]


class SplitFragmentsTests(unittest.TestCase):
    def test_comma_separated(self) -> None:
        self.assertEqual(split_fragments("pda:vault,user,signer"), ["vault", "user", "signer"])

    def test_nested_fragment_stays_whole(self) -> None:
        self.assertEqual(split_fragments("pda:pda:vault,signer"), ["pda:vault", "signer"])

    def test_legacy_colon_form(self) -> None:
        self.assertEqual(split_fragments("pda:vault:signer"), ["vault", "signer"])

    def test_rejects_empty_fragments(self) -> None:
        for spec in ("pda:", "pda:a,,b", "pda:a,"):
            with self.assertRaises(ResolutionError):
                split_fragments(spec)

    def test_requires_prefix(self) -> None:
        with self.assertRaises(ResolutionError):
            split_fragments("vault,signer")


class DeriveAddressTests(unittest.TestCase):
    def setUp(self) -> None:
        self.caller = Keypair().pubkey()

    def test_literal_seeds(self) -> None:
        self.assertEqual(derive_address("pda:a,b", self.caller, PROGRAM_ID), _find([b"a", b"b"]))

    def test_deterministic(self) -> None:
        first = derive_address("pda:a,b", self.caller, PROGRAM_ID)
        second = derive_address("pda:a,b", self.caller, PROGRAM_ID)
        self.assertEqual(first, second)

    def test_signer_fragment_uses_caller_bytes(self) -> None:
        expected = _find([b"a", bytes(self.caller)])
        self.assertEqual(derive_address("pda:a,signer", self.caller, PROGRAM_ID), expected)

    def test_caller_sensitive(self) -> None:
        other = Keypair().pubkey()
        self.assertNotEqual(
            derive_address("pda:a,signer", self.caller, PROGRAM_ID),
            derive_address("pda:a,signer", other, PROGRAM_ID),
        )

    def test_program_sensitive(self) -> None:
        self.assertNotEqual(
            derive_address("pda:a", self.caller, PROGRAM_ID),
            derive_address("pda:a", self.caller, Pubkey.new_unique()),
        )

    def test_nested_derivation_uses_inner_address_bytes(self) -> None:
        inner = _find([b"x"])
        expected = _find([bytes(inner), b"y"])
        result = derive_address("pda:pda:x,y", self.caller, PROGRAM_ID)
        self.assertEqual(result, expected)
        self.assertNotEqual(result, derive_address("pda:x,y", self.caller, PROGRAM_ID))

    def test_nested_vault_under_user(self) -> None:
        global_vault = _find([b"vault"])
        expected = _find([bytes(global_vault), bytes(self.caller)])
        self.assertEqual(derive_address("pda:pda:vault,signer", self.caller, PROGRAM_ID), expected)

    def test_legacy_colon_matches_comma_form(self) -> None:
        self.assertEqual(
            derive_address("pda:vault:signer", self.caller, PROGRAM_ID),
            derive_address("pda:vault,signer", self.caller, PROGRAM_ID),
        )

    def test_seed_too_long(self) -> None:
        with self.assertRaises(ResolutionError):
            derive_address("pda:" + "x" * 33, self.caller, PROGRAM_ID)

    def test_too_many_seeds(self) -> None:
        spec = "pda:" + ",".join(str(i) for i in range(16))
        with self.assertRaises(ResolutionError):
            seed_list(spec, self.caller, PROGRAM_ID)


if __name__ == "__main__":
    unittest.main()
