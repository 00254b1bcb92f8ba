import os
import re
from urllib.parse import quote, unquote

from rrdagent.utils.error import ExpressionSyntaxError
from rrdgraph.exceptions import ExpressionError

NAME = re.compile(r'[A-Za-z_][A-Za-z0-9_]*$')


def _env(context, name):
    return context.env.get(name, '')

FUNCTIONS = {
    'env': _env,
    'tolower': lambda context, value: value.lower(),
    'toupper': lambda context, value: value.upper(),
    'escape': lambda context, value: quote(value),
    'unescape': lambda context, value: unquote(value),
    'basename': lambda context, value: os.path.basename(value),
    'dirname': lambda context, value: os.path.dirname(value),
    }


class Literal(object):

    def __init__(self, text):
        self.text = text

    def evaluate(self, context):
        return self.text


class Variable(object):

    def __init__(self, name):
        self.name = name

    def evaluate(self, context):
        try:
            return context.variables[self.name]
        except KeyError:
            raise ExpressionError(
                "Variable '%s' is not available to this request" % self.name)


class Function(object):

    def __init__(self, name, argument):
        self.name = name
        self.argument = argument

    def evaluate(self, context):
        value = ''.join(part.evaluate(context) for part in self.argument)
        return FUNCTIONS[self.name](context, value)


def _parse(source, pos, nested):
    parts = []
    literal = []
    while pos < len(source):
        if source.startswith('%{', pos):
            if literal:
                parts.append(Literal(''.join(literal)))
                literal = []
            reference, pos = _parseReference(source, pos + 2)
            parts.append(reference)
        elif nested and source[pos] == '}':
            break
        else:
            literal.append(source[pos])
            pos += 1
    else:
        if nested:
            raise ExpressionSyntaxError(source, "missing closing brace")
    if literal:
        parts.append(Literal(''.join(literal)))
    return parts, pos


def _parseReference(source, pos):
    end = pos
    while end < len(source) and source[end] not in ':}':
        end += 1
    if end == len(source):
        raise ExpressionSyntaxError(source, "missing closing brace")
    name = source[pos:end]
    if source[end] == '}':
        if not NAME.match(name):
            raise ExpressionSyntaxError(source,
                "invalid variable name '%s'" % name)
        return Variable(name), end + 1
    if name not in FUNCTIONS:
        raise ExpressionSyntaxError(source, "unknown function '%s'" % name)
    argument, end = _parse(source, end + 1, True)
    # skip the closing brace of the function
    return Function(name, argument), end + 1


class Expression(object):
    '''
    A string holding references to request variables, %{NAME}, and
    function calls, %{function:argument}. Function arguments may contain
    references themselves.

    >>> from rrdgraph.context import Context
    >>> context = Context({'SERVER_NAME': 'Example.com',
    ...     'FILENAME': '/var/lib/rrd/host1.rrd'}, {'HOSTS': 'h1,h2'})
    >>> Expression('%{tolower:%{SERVER_NAME}}').evaluate(context)
    'example.com'
    >>> Expression('Traffic of %{basename:%{FILENAME}}').evaluate(context)
    'Traffic of host1.rrd'
    >>> Expression('%{env:HOSTS} and %{env:MISSING}.').evaluate(context)
    'h1,h2 and .'
    >>> Expression('100%').evaluate(context)
    '100%'
    >>> Expression('%{nosuch:thing}')
    Traceback (most recent call last):
    rrdagent.utils.error.ExpressionSyntaxError: <Syntax error in expression "%{nosuch:thing}": unknown function 'nosuch'>
    '''

    def __init__(self, source):
        self.source = source
        self.parts, end = _parse(source, 0, False)

    @property
    def isStatic(self):
        return all(isinstance(part, Literal) for part in self.parts)

    def evaluate(self, context):
        return ''.join(part.evaluate(context) for part in self.parts)

    def __str__(self):
        return self.source

    def __repr__(self):
        return '<Expression %r>' % self.source


def evaluate(expression, context):
    '''
    The evaluator handed to the graph compiler.
    '''
    return expression.evaluate(context)


if __name__ == '__main__':
    import doctest
    doctest.testmod()
