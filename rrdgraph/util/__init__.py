import re

QUOTES = ('"', "'")
# backslashes that would otherwise escape the following field separator
SEPARATOR_BACKSLASHES = re.compile(r'(\\+)(?=:|\Z)')


def splitQuoted(data, stop):
    r'''
    Take one word off the front of data, up to the stop character.

    A word starting with a quote runs to the matching quote, and within it
    a backslash escapes the quote character or another backslash. Anything
    left between the closing quote and the next stop character is dropped.
    An unquoted word is taken verbatim. A single trailing stop character is
    consumed.

    Returns a (word, remainder) tuple.

    >>> splitQuoted('Traffic:dashes', ':')
    ('Traffic', 'dashes')
    >>> splitQuoted('"Out: Octets":STACK', ':')
    ('Out: Octets', 'STACK')
    >>> splitQuoted(r"'it\'s a \\ test'", ':')
    ("it's a \\ test", '')
    >>> splitQuoted(r'C:\temp', ':')
    ('C', '\\temp')
    >>> splitQuoted('', ':')
    ('', '')
    >>> splitQuoted('"unterminated', ':')
    ('unterminated', '')
    '''
    if not data:
        return '', ''

    quote = data[0]
    if quote in QUOTES:
        word = []
        end = len(data)
        pos = 1
        while pos < end and data[pos] != quote:
            if data[pos] == '\\' and pos + 1 < end and \
                data[pos + 1] in (quote, '\\'):
                pos += 1
            word.append(data[pos])
            pos += 1
        word = ''.join(word)
        if pos < end:
            # closing quote
            pos += 1
        stopAt = data.find(stop, pos)
    else:
        stopAt = data.find(stop)
        word = data if stopAt < 0 else data[:stopAt]

    if stopAt < 0:
        return word, ''
    return word, data[stopAt + 1:]


def escapeColons(data):
    r'''
    Text placed in a colon separated argument (legends and paths) has to
    have its colons escaped, since rrdtool uses them as field separators.

    A run of backslashes that ends right before a colon or at the end of
    the text is doubled first, so that it is not read as escaping the
    separator that follows it.

    The argument is handed back untouched when there is nothing to escape.

    >>> escapeColons('now')
    'now'
    >>> escapeColons('end-8days8hours')
    'end-8days8hours'
    >>> escapeColons('13:00')
    '13\\:00'
    >>> escapeColons('x\\')
    'x\\\\'
    >>> escapeColons('Traffic\\l')
    'Traffic\\l'
    >>> s = 'no colons here'
    >>> escapeColons(s) is s
    True
    '''
    if ':' not in data and not data.endswith('\\'):
        return data
    data = SEPARATOR_BACKSLASHES.sub(lambda match: match.group(1) * 2, data)
    return data.replace(':', '\\:')


if __name__ == '__main__':
    import doctest
    doctest.testmod()
