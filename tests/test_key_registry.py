from __future__ import annotations

import unittest

from vuit.input.key_registry import KeyComboBinding, KeyComboRegistry


class KeyComboRegistryTests(unittest.TestCase):
    def test_binding_dispatches_every_combo(self) -> None:
        calls: list[str] = []
        registry = KeyComboRegistry().register_bindings(
            KeyComboBinding(("DOWN", "CTRL_J"), lambda: calls.append("down") or True),
        )

        self.assertTrue(registry.dispatch("DOWN"))
        self.assertTrue(registry.dispatch("CTRL_J"))
        self.assertEqual(calls, ["down", "down"])

    def test_unbound_key_uses_fallback_or_returns_none(self) -> None:
        seen: list[str] = []
        with_fallback = KeyComboRegistry(fallback=lambda key: seen.append(key) or True)
        without_fallback = KeyComboRegistry()

        self.assertTrue(with_fallback.dispatch("x"))
        self.assertIsNone(without_fallback.dispatch("x"))
        self.assertEqual(seen, ["x"])

    def test_later_binding_overrides_earlier_combo(self) -> None:
        registry = KeyComboRegistry().register_bindings(
            KeyComboBinding(("ENTER",), lambda: False),
            KeyComboBinding(("ENTER",), lambda: True),
        )

        self.assertTrue(registry.dispatch("ENTER"))
        self.assertEqual(registry.bound_keys(), frozenset({"ENTER"}))


if __name__ == "__main__":
    unittest.main()
