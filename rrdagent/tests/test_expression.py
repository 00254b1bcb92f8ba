import doctest
from unittest import TestCase

from rrdagent.core import expression
from rrdagent.core.expression import Expression, evaluate
from rrdagent.utils.error import ExpressionSyntaxError
from rrdgraph.context import Context
from rrdgraph.exceptions import ExpressionError, ServerError


class ExpressionTestCase(TestCase):

    def setUp(self):
        self.context = Context({
            'SERVER_NAME': 'Example.com',
            'REQUEST_METHOD': 'GET',
            'FILENAME': '/var/lib/rrd/host 1.rrd',
            }, {'HOSTS': 'h1,h2'})

    def test_literal(self):
        source = 'Traffic: in {bytes} 100%'
        parsed = Expression(source)
        self.assertTrue(parsed.isStatic)
        self.assertEqual(evaluate(parsed, self.context), source)
        self.assertEqual(str(parsed), source)

    def test_variable(self):
        parsed = Expression('%{REQUEST_METHOD} on %{SERVER_NAME}')
        self.assertFalse(parsed.isStatic)
        self.assertEqual(evaluate(parsed, self.context), 'GET on Example.com')

    def test_functions(self):
        for source, expected in (
            ('%{tolower:%{SERVER_NAME}}', 'example.com'),
            ('%{toupper:abc}', 'ABC'),
            ('%{escape:%{FILENAME}}', '/var/lib/rrd/host%201.rrd'),
            ('%{unescape:a%20b}', 'a b'),
            ('%{basename:%{FILENAME}}', 'host 1.rrd'),
            ('%{dirname:%{FILENAME}}', '/var/lib/rrd'),
            ('%{env:HOSTS}', 'h1,h2'),
            ('%{env:NOTSET}', ''),
            ('[%{toupper:%{basename:%{dirname:%{FILENAME}}}}]', '[RRD]'),
            ):
            self.assertEqual(Expression(source).evaluate(self.context),
                expected, source)

    def test_missingVariable(self):
        parsed = Expression('%{REMOTE_USER}')
        self.assertRaises(ExpressionError, parsed.evaluate, self.context)
        self.assertTrue(issubclass(ExpressionError, ServerError))

    def test_syntaxErrors(self):
        for source in ('%{SERVER_NAME', '%{tolower:abc', '%{}', '%{bad name}',
            '%{nosuch:abc}', '%{tolower:%{x}'):
            self.assertRaises(ExpressionSyntaxError, Expression, source)

    def test_docstrings(self):
        failures, tests = doctest.testmod(expression)
        self.assertEqual(failures, 0)
