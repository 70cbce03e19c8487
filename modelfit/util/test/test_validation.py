import unittest

import numpy

from modelfit.util.validation import is_positive, is_positive_int


class TestValidation(unittest.TestCase):

    def test_is_positive(self):
        self.assertTrue(is_positive(1))
        self.assertTrue(is_positive(1e-300))
        self.assertTrue(is_positive(numpy.float64(0.5)))
        self.assertTrue(is_positive(float('inf')))

        self.assertFalse(is_positive(0))
        self.assertFalse(is_positive(-0.1))
        self.assertFalse(is_positive(float('-inf')))
        self.assertFalse(is_positive(float('nan')))
        self.assertFalse(is_positive(True))
        self.assertFalse(is_positive('1.0'))
        self.assertFalse(is_positive(None))

    def test_is_positive_int(self):
        self.assertTrue(is_positive_int(3))
        self.assertTrue(is_positive_int(numpy.int64(3)))

        self.assertFalse(is_positive_int(0))
        self.assertFalse(is_positive_int(2.0))
        self.assertFalse(is_positive_int(True))
