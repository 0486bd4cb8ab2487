import itertools
import unittest

from menutree import MemoryClient, MenuConfig
from menutree.render import UNIQUE_PREFIX, button_unique

from .menu_util import build_menu


class TestRender(unittest.TestCase):
    def setUp(self):
        self.clock = itertools.count(1000)
        self.client = MemoryClient()
        self.menu = build_menu(self.client, now_func=lambda: next(self.clock))

    def test_paths_follow_tree_shape(self):
        self.menu.build("en")

        for node in self.menu.walk():
            parent = node.parent
            if parent is None:
                self.assertEqual(node.path, "menu")
            else:
                self.assertEqual(node.path, f"{parent.path}/{node.text}")
        self.assertEqual(self.menu.find("B/B1/B1a").path, "menu/B/B1/B1a")

    def test_paths_are_refreshed_on_rebuild(self):
        self.menu.build("en")
        moved = self.menu.find("B/B1/B1a")

        self.menu.find("A").add_many(moved)
        self.assertEqual(moved.path, "menu/B/B1/B1a")

        self.menu.build("en")
        self.assertEqual(moved.path, "menu/A/B1a")

    def test_custom_base_path_is_root_path(self):
        menu = build_menu(config=MenuConfig(base_path="bot", locales=("en",)))
        menu.build("en")

        self.assertEqual(menu.root.path, "bot")
        self.assertEqual(menu.find("A/A1").path, "bot/A/A1")

    def test_markups_exist_only_for_built_locales(self):
        self.menu.build("en")

        self.assertTrue(self.menu.rendered("en"))
        self.assertFalse(self.menu.rendered("fr"))
        for node in self.menu.walk():
            self.assertIsNotNone(node.markup("en"))
            self.assertIsNone(node.markup("fr"))

        self.menu.build_all()
        self.assertEqual(self.menu.rendered_locales, {"en", "fr"})

    def test_labels_are_translated_per_locale(self):
        self.menu.build_all()

        en = [b.text for b in self.menu.find("B").markup("en").buttons()]
        fr = [b.text for b in self.menu.find("B").markup("fr").buttons()]

        self.assertEqual(en, ["Beta one", "Beta two"])
        # B2 has no French entry and falls back to English.
        self.assertEqual(fr, ["Bêta un", "Beta two"])

    def test_leaf_markup_is_empty(self):
        self.menu.build("en")

        self.assertEqual(self.menu.find("A/A1").markup("en").inline_keyboard, [])

    def test_button_identifiers_and_handlers(self):
        self.menu.build("en")
        alpha = self.menu.find("A")
        leaf = self.menu.find("A/A1")

        root_buttons = self.menu.root.markup("en").buttons()
        self.assertEqual(root_buttons[0].unique, button_unique(1000, "en", alpha.id))
        self.assertIn(UNIQUE_PREFIX + "en", root_buttons[0].unique)

        dead_end = self.client.handlers.get(root_buttons[0].unique)
        self.assertEqual(dead_end.handler, alpha.handle_dead_end)

        leaf_unique = alpha.markup("en").buttons()[0].unique
        self.assertEqual(self.client.handlers.get(leaf_unique).handler, leaf.handle)

    def test_rebuild_replaces_previous_generation(self):
        self.menu.build("en")
        first = [b.unique for b in self.menu.root.markup("en").buttons()]
        bound = len(self.client.handlers)

        self.menu.build("en")
        second = [b.unique for b in self.menu.root.markup("en").buttons()]

        self.assertEqual(len(self.client.handlers), bound)
        self.assertTrue(set(first).isdisjoint(second))
        for unique in first:
            self.assertNotIn(unique, self.client.handlers)
        for unique in second:
            self.assertIn(unique, self.client.handlers)

    def test_each_locale_keeps_its_own_bindings(self):
        self.menu.build_all()

        # every non-root node has one button per locale
        self.assertEqual(len(self.client.handlers), 2 * (len(self.menu) - 1))


if __name__ == "__main__":
    unittest.main()
