import unittest

from luminosity.named_objects import NamedObject, NamedObjectList


class TestNamedObjectList(unittest.TestCase):
    """Test cases for merging lens and camera lists."""

    def setUp(self):
        self.first = NamedObjectList([NamedObject(1, "Nikon D750"), NamedObject(2, "Canon R5")])
        self.second = NamedObjectList([NamedObject(9, "Canon R5"), NamedObject(3, "Fuji X-T4")])

    def test_from_rows(self):
        objects = NamedObjectList.from_rows([(1, "EF 50mm"), (2, None)])

        self.assertEqual(objects, [NamedObject(1, "EF 50mm"), NamedObject(2, "")])

    def test_merge_unique_by_name(self):
        merged = self.first.merge(self.second)

        self.assertEqual(merged.names(), ["Canon R5", "Fuji X-T4", "Nikon D750"])

    def test_merge_keeps_first_id(self):
        merged = self.first.merge(self.second)

        self.assertEqual(merged.to_map()["Canon R5"].id, 2)

    def test_merge_is_idempotent(self):
        merged = self.first.merge(self.first)

        self.assertEqual(merged, sorted(self.first, key=lambda o: o.name))

    def test_merge_disjoint_lists(self):
        other = NamedObjectList([NamedObject(5, "Leica Q2")])

        self.assertEqual(len(self.first.merge(other)), len(self.first) + len(other))

    def test_merge_leaves_inputs_untouched(self):
        self.first.merge(self.second)

        self.assertEqual(self.first.names(), ["Nikon D750", "Canon R5"])
        self.assertEqual(self.second.names(), ["Canon R5", "Fuji X-T4"])

    def test_merge_sorts_by_code_point(self):
        objects = NamedObjectList([NamedObject(1, "alpha"), NamedObject(2, "Zeta")])

        self.assertEqual(objects.merge([]).names(), ["Zeta", "alpha"])

    def test_duplicates_within_one_list(self):
        objects = NamedObjectList([NamedObject(1, "A"), NamedObject(2, "A")])

        merged = objects.merge(NamedObjectList())
        self.assertEqual(merged.to_list(), [{'id': 1, 'name': "A"}])


if __name__ == '__main__':
    unittest.main()
