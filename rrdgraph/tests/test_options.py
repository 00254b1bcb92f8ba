from unittest import TestCase

from rrdgraph.options import OPTIONS, VALUE_FORBIDDEN, VALUE_REQUIRED, parseOption


class ParseOptionTestCase(TestCase):

    def test_valueRequired(self):
        option = parseOption('title', 'Traffic')
        self.assertEqual((option.key, option.value), ('title', 'Traffic'))
        self.assertFalse(option.isDynamic)
        self.assertEqual(option.toArgs(), ['--title', 'Traffic'])

    def test_emptyValue(self):
        self.assertEqual(parseOption('title', '').toArgs(), ['--title', ''])

    def test_valueMissing(self):
        self.assertTrue(parseOption('width') is None)

    def test_valueForbidden(self):
        self.assertEqual(parseOption('rigid').toArgs(), ['--rigid'])
        self.assertTrue(parseOption('rigid', '') is None)
        self.assertTrue(parseOption('rigid', 'true') is None)

    def test_unknown(self):
        for key in ('daemon', 'imgformat', 'TITLE', ''):
            self.assertTrue(parseOption(key, 'x') is None, key)
            self.assertTrue(parseOption(key) is None, key)

    def test_dynamic(self):
        option = parseOption('title', 'source', 'compiled')
        self.assertTrue(option.isDynamic)
        self.assertEqual(option.toArgs('evaluated'), ['--title', 'evaluated'])

    def test_expressionOnForbidden(self):
        self.assertTrue(parseOption('rigid', None, 'compiled') is None)

    def test_table(self):
        self.assertEqual(OPTIONS['upper-limit'], VALUE_REQUIRED)
        self.assertEqual(OPTIONS['lower-limit'], VALUE_REQUIRED)
        self.assertEqual(OPTIONS['slope-mode'], VALUE_FORBIDDEN)
        for key, arity in OPTIONS.items():
            self.assertTrue(arity in (VALUE_REQUIRED, VALUE_FORBIDDEN), key)
