import os
import tempfile
import unittest

import numpy as np

from modelfit.data.table import DataTable


CSV_TEXT = """\
"year", weight ,colour,
2001, 10.5, red, a
2002, 11.0, "blue", b
2003, ?, red, c

2004, 12.5, green, a
"""


class TestDataTable(unittest.TestCase):

    def setUp(self):
        self.random_state = np.random.RandomState(1234)
        self.tmp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp_dir.cleanup()

    def write_csv(self, text, name="data.csv"):
        filename = os.path.join(self.tmp_dir.name, name)
        with open(filename, 'w') as f:
            f.write(text)
        return filename

    def test_read_csv(self):
        table = DataTable.read_csv(self.write_csv(CSV_TEXT))

        self.assertEqual(table.n_cols, 4)
        self.assertEqual(table.column_names,
                         ["year", "weight", "colour", "<blank>"])

        # The row with a missing value is discarded
        self.assertEqual(table.n_rows, 3)
        self.assertEqual(table.get_raw_row(1), ["2002", "11.0", "blue", "b"])
        self.assertEqual(table.get_raw_column("year"),
                         ["2001", "2002", "2004"])

    def test_read_csv_without_header(self):
        table = DataTable.read_csv(self.write_csv("1,2\n3,4\n"),
                                   header=False)

        self.assertEqual(table.n_rows, 2)
        self.assertEqual(table.n_cols, 2)
        self.assertEqual(table.column_names, [])
        np.testing.assert_array_equal(table.get_numeric_column(1), [2, 4])

    def test_read_csv_inconsistent_row(self):
        filename = self.write_csv("a,b\n1,2\n3,4,5\n")

        with self.assertRaises(ValueError):
            DataTable.read_csv(filename)

    def test_read_missing_file(self):
        with self.assertRaises(OSError):
            DataTable.read_csv(os.path.join(self.tmp_dir.name, "none.csv"))

    def test_column_index(self):
        table = DataTable.read_csv(self.write_csv(CSV_TEXT))

        self.assertEqual(table.column_index("weight"), 1)
        self.assertEqual(table.column_index("height"), -1)

    def test_numeric_values_and_aliases(self):
        table = DataTable.read_csv(self.write_csv(CSV_TEXT))

        np.testing.assert_array_equal(table.get_numeric_column("weight"),
                                      [10.5, 11.0, 12.5])

        # Aliases are assigned in order of first appearance
        np.testing.assert_array_equal(table.get_numeric_column(2),
                                      [0.0, 1.0, 2.0])
        self.assertEqual(table.get_alias_value("blue", 2), 1.0)
        self.assertEqual(table.get_alias_value("green", "colour"), 2.0)

        # Aliases belong to a column
        np.testing.assert_array_equal(table.get_numeric_column(3),
                                      [0.0, 1.0, 0.0])
        np.testing.assert_array_equal(table.get_numeric_row(2),
                                      [2004.0, 12.5, 2.0, 0.0])

        self.assertIsNone(table.get_alias_value("purple", 2))

    def test_set_alias(self):
        table = DataTable.read_csv(self.write_csv(CSV_TEXT))

        self.assertTrue(table.set_alias("red", 10.0, "colour"))
        self.assertTrue(table.set_alias("blue", 20.0, 2))

        np.testing.assert_array_equal(table.get_numeric_column(2),
                                      [10.0, 20.0, 0.0])

        # Replace an existing alias
        table.set_alias("green", -1.0, 2)
        np.testing.assert_array_equal(table.get_numeric_column(2),
                                      [10.0, 20.0, -1.0])

        self.assertFalse(table.set_alias("red", 1.0, 7))

    def test_out_of_range(self):
        table = DataTable.read_csv(self.write_csv(CSV_TEXT))

        self.assertIsNone(table.get_raw_row(3))
        self.assertIsNone(table.get_numeric_row(-1))
        self.assertIsNone(table.get_raw_column(4))
        self.assertIsNone(table.get_numeric_column("height"))

    def test_add_raw_row(self):
        table = DataTable()

        self.assertTrue(table.add_raw_row([1, 2.5, "x"]))
        self.assertEqual(table.n_cols, 3)
        self.assertFalse(table.add_raw_row([1, 2]))
        self.assertFalse(table.add_raw_row([]))
        self.assertEqual(table.n_rows, 1)

        np.testing.assert_array_equal(table.get_numeric_row(0),
                                      [1.0, 2.5, 0.0])

    def test_column_names(self):
        table = DataTable(column_names=["x", "y"])

        self.assertEqual(table.n_cols, 2)
        self.assertFalse(table.add_raw_row([1, 2, 3]))

        with self.assertRaises(ValueError):
            table.column_names = ["a", "b", "c"]

        table.column_names = ["a", "b"]
        self.assertEqual(table.column_index("b"), 1)

    def test_training_columns(self):
        table = DataTable.read_csv(self.write_csv(CSV_TEXT))

        x, y = table.training_columns("year", "weight")
        np.testing.assert_array_equal(x, [2001, 2002, 2004])
        np.testing.assert_array_equal(y, [10.5, 11.0, 12.5])

        with self.assertRaises(KeyError):
            table.training_columns("year", "height")

    def test_write_csv(self):
        table = DataTable.read_csv(self.write_csv(CSV_TEXT))

        filename = os.path.join(self.tmp_dir.name, "out.csv")
        table.write_csv(filename)

        copy = DataTable.read_csv(filename)

        self.assertEqual(copy.column_names, table.column_names)
        for row in range(table.n_rows):
            self.assertEqual(copy.get_raw_row(row), table.get_raw_row(row))

        with self.assertRaises(OSError):
            table.write_csv(os.path.join(self.tmp_dir.name, "no", "a.csv"))
