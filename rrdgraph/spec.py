from urllib.parse import unquote_to_bytes

from rrdgraph.exceptions import UnrecognisedTokenError
from rrdgraph.graph import parseElement, validateImageFormat
from rrdgraph.options import Option, parseOption


class GraphSpec(object):
    '''
    Everything needed to build one rrdgraph argument list: the image
    format, the options and the ordered graph commands.

    names maps each vname to the index of the command that defined it,
    and is filled in by the resolver as it walks the commands, so only
    names defined earlier are ever visible.
    '''
    def __init__(self, commands=None, options=None, format='PNG'):
        self.commands = list(commands or [])
        self.options = list(options or [])
        self.format = validateImageFormat(format)
        self.names = {}

    def __repr__(self):
        return '<GraphSpec %s options=%r commands=%r>' % (
            self.format, self.options, self.commands)


def splitQuery(query):
    '''
    Split a raw query string on '&' and percent-decode each fragment.
    A '+' is left alone, since it is meaningful inside RPN expressions.

    >>> list(splitQuery('title=a%20b&&CDEF:c=a,b,+'))
    ['title=a b', 'CDEF:c=a,b,+']
    >>> list(splitQuery(b'rigid'))
    ['rigid']
    '''
    separator = b'&' if isinstance(query, bytes) else '&'
    for fragment in query.split(separator):
        if not fragment:
            continue
        raw = unquote_to_bytes(fragment)
        try:
            yield raw.decode('utf-8')
        except UnicodeDecodeError:
            raise UnrecognisedTokenError(raw.decode('utf-8', 'replace'))


def parseToken(token):
    '''
    A query token is tried as a graph element first, then as an option.

    >>> parseToken('LINE2:a#ff0000')
    LINE2:a#ff0000
    >>> parseToken('title=Traffic: in')
    --title Traffic: in
    >>> parseToken('bogus')
    Traceback (most recent call last):
    rrdgraph.exceptions.UnrecognisedTokenError: Query was not recognised: bogus
    '''
    element = parseElement(token)
    if element is not None:
        return element
    key, sep, value = token.partition('=')
    option = parseOption(key, value if sep else None)
    if option is not None:
        return option
    raise UnrecognisedTokenError(token)


def parseQuery(query):
    '''
    Parse a query string into (options, commands). The first fragment
    that is neither fails the whole query.
    '''
    options = []
    commands = []
    for token in splitQuery(query or ''):
        parsed = parseToken(token)
        if isinstance(parsed, Option):
            options.append(parsed)
        else:
            commands.append(parsed)
    return options, commands


def assemble(baseOptions, baseElements, query, format='PNG'):
    '''
    Build the GraphSpec for one request. The configured options and
    elements come first, followed by those from the query string.

    The configured elements are shared by every request to a location,
    so the spec is given fresh copies of them.
    '''
    options, commands = parseQuery(query)
    return GraphSpec(
        [command.clone() for command in baseElements] + commands,
        list(baseOptions) + options,
        format)


if __name__ == '__main__':
    import doctest
    doctest.testmod()
