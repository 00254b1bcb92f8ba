import copy
import os
import re

from rrdgraph.util import escapeColons, splitQuoted

# --imgformat values and the content type each one is served as
FORMATS = (
    ('PNG', 'image/png'),
    ('SVG', 'image/svg+xml'),
    ('EPS', 'application/eps'),
    ('PDF', 'application/pdf'),
    ('XML', 'application/xml'),
    ('XMLENUM', 'application/xml'),
    ('JSON', 'application/json'),
    ('JSONTIME', 'application/json'),
    ('CSV', 'text/csv'),
    ('TSV', 'text/tab-separated-values'),
    ('SSV', 'text/plain'),
    )
CONTENT_TYPES = dict(FORMATS)


def validateVName(name):
    '''
    RRDTool vnames must be made up strings of the following characters:
         A-Z, a-z, 0-9, -,_
    and have a maximum length of 255 characters.

    >>> vname = validateVName('Zaphod Beeble-Brox!')
    Traceback (most recent call last):
    ValueError: Names must consist only of the characters A-Z, a-z, 0-9, -, _
    >>> vname = validateVName('Zaphod_Beeble-Brox')
    >>> vname = validateVName('a'*255)
    >>> vname = validateVName('a'*256)
    Traceback (most recent call last):
    ValueError: Names must be shorter than 255 characters
    >>> vname = validateVName('')
    Traceback (most recent call last):
    ValueError: Names must not be empty
    '''
    if not name:
        raise ValueError("Names must not be empty")
    if name != re.sub('[^A-Za-z0-9_-]', '', name):
        raise ValueError("Names must consist only of the characters " +
            "A-Z, a-z, 0-9, -, _")
    if len(name) > 255:
        raise ValueError("Names must be shorter than 255 characters")
    return name


def validateImageFormat(format):
    '''
    >>> validateImageFormat('txt')
    Traceback (most recent call last):
    ValueError: The image format must be one of the following: PNG SVG EPS PDF XML XMLENUM JSON JSONTIME CSV TSV SSV
    >>> validateImageFormat('png')
    'PNG'
    >>> validateImageFormat('JsonTime')
    'JSONTIME'
    '''
    format = format.upper()
    if format in CONTENT_TYPES:
        return format
    valid = ' '.join(name for name, contentType in FORMATS)
    raise ValueError('The image format must be one of the ' +
        'following: %s' % valid)


def formatFromSuffix(filename):
    '''
    Work out the image format from the suffix of the requested file.

    >>> formatFromSuffix('/rrd/monitor.png')
    'PNG'
    >>> formatFromSuffix('traffic.JSONTIME')
    'JSONTIME'
    >>> formatFromSuffix('monitor.rrd')
    >>> formatFromSuffix('monitor')
    '''
    root, ext = os.path.splitext(os.path.basename(filename))
    format = ext[1:].upper()
    if format in CONTENT_TYPES:
        return format
    return None


def contentType(format):
    return CONTENT_TYPES[format.upper()]


def suffixed(vname, index=None):
    '''
    The name of the index'th per source variant of vname.

    >>> suffixed('a')
    'a'
    >>> suffixed('a', 0)
    'aw0'
    >>> suffixed('ifOutOctets', 12)
    'ifOutOctetsw12'
    '''
    if index is None:
        return vname
    return '%sw%d' % (vname, index)


def joinFields(fields):
    '''
    Join optional trailing fields of an element, leaving off the empty
    ones at the end.

    >>> joinFields(['Traffic', ''])
    ':Traffic'
    >>> joinFields(['', 'STACK'])
    '::STACK'
    >>> joinFields(['', ''])
    ''
    '''
    fields = list(fields)
    while fields and not fields[-1]:
        fields.pop()
    return ''.join(':' + field for field in fields)


class Command(object):
    '''
    One element of a graph description.

    backing is the index, within the GraphSpec's command list, of the
    DEF that ultimately supplies this command's data, and multiplicity is
    the number of RRD files behind that DEF. Both are filled in by the
    resolver.
    '''
    kind = None
    # this command defines a vname
    defines = False
    # this command refers to a vname that must already be defined
    refers = False

    def __init__(self):
        self.vname = None
        self.reset()

    def reset(self):
        self.backing = None
        self.multiplicity = 0

    def clone(self):
        '''
        A fresh, unresolved copy. Configured elements are shared between
        requests, so each request works on its own copies.
        '''
        other = copy.copy(self)
        other.reset()
        return other

    def __repr__(self):
        return self.toArg()


class DataDefinition(Command):
    '''
    Fetches data from one or more RRD files. The path may hold wildcards,
    in which case every matched file becomes its own source.

    >>> DataDefinition('ds0a', 'router*.rrd', 'ds0', 'AVERAGE')
    DEF:ds0a=router*.rrd:ds0:AVERAGE
    >>> DataDefinition('ds0a', 'router1.rrd', 'ds0',
    ...     'AVERAGE').toArg(1, '/data/10:00.rrd')
    'DEF:ds0aw1=/data/10\\\\:00.rrd:ds0:AVERAGE'
    >>> DataDefinition('ds0a', 'router1.rrd', 'ds0', '')
    Traceback (most recent call last):
    ValueError: vname, path, dsName, and cf are all required attributes and cannot be empty.
    '''
    kind = 'DEF'
    defines = True

    def __init__(self, vname, path, dsName, cf, pathExpr=None, dirExpr=None):
        Command.__init__(self)
        if not (vname and path and dsName and cf):
            raise ValueError("vname, path, dsName, and cf are all " +
                "required attributes and cannot be empty.")
        self.vname = validateVName(vname)
        self.path = path
        self.dsName = dsName
        self.cf = cf
        self.pathExpr = pathExpr
        self.dirExpr = dirExpr

    def reset(self):
        Command.reset(self)
        self.sources = []

    def hasDaemon(self):
        '''
        True when the consolidation function part tries to set the
        rrdcached daemon address.

        >>> DataDefinition('a', 'a.rrd', 'in', 'AVERAGE').hasDaemon()
        False
        >>> DataDefinition('a', 'a.rrd', 'in',
        ...     'AVERAGE:step=60:daemon=evil:42217').hasDaemon()
        True
        >>> DataDefinition('a', 'a.rrd', 'in', 'daemon=evil').hasDaemon()
        True
        '''
        return ':daemon=' in ':' + self.cf

    def toArg(self, index=None, path=None):
        if path is None:
            path = self.path
        return 'DEF:%s=%s:%s:%s' % (suffixed(self.vname, index),
            escapeColons(path), self.dsName, self.cf)

DEF = DataDefinition


class VariableDefinition(Command):
    '''
    Derives a single value from a series.

    >>> vdef = VariableDefinition('ds0max', 'ds0a', 'MAXIMUM')
    >>> vdef
    VDEF:ds0max=ds0a,MAXIMUM
    >>> vdef.toArg(3)
    'VDEF:ds0maxw3=ds0aw3,MAXIMUM'
    '''
    kind = 'VDEF'
    defines = True

    def __init__(self, vname, dsName, rpn):
        Command.__init__(self)
        self.vname = validateVName(vname)
        self.dsName = dsName
        self.rpn = rpn

    def toArg(self, index=None):
        return 'VDEF:%s=%s,%s' % (suffixed(self.vname, index),
            suffixed(self.dsName, index), self.rpn)

VDEF = VariableDefinition


class RPNToken(object):
    '''
    One comma separated term of a CDEF expression. A term that names an
    earlier definition carries that definition's kind, the index of its
    backing DEF and its multiplicity.
    '''
    __slots__ = ['text', 'isReference', 'kind', 'backing', 'multiplicity']

    def __init__(self, text):
        self.text = text
        self.isReference = False
        self.kind = None
        self.backing = None
        self.multiplicity = 0

    def __repr__(self):
        return self.text


class CalculationDefinition(Command):
    '''
    Creates a new series out of other series with an RPN expression.

    >>> cdef = CalculationDefinition('mydatabits', 'mydata,8,*')
    >>> cdef
    CDEF:mydatabits=mydata,8,*
    >>> cdef.tokens
    [mydata, 8, *]
    >>> cdef.toArg(0, 'mydataw0,8,*')
    'CDEF:mydatabitsw0=mydataw0,8,*'
    '''
    kind = 'CDEF'
    defines = True

    def __init__(self, vname, rpn):
        self.rpn = rpn
        Command.__init__(self)
        self.vname = validateVName(vname)

    def reset(self):
        Command.reset(self)
        self.tokens = [RPNToken(text) for text in self.rpn.split(',') if text]

    def toArg(self, index=None, rpn=None):
        if rpn is None:
            rpn = self.rpn
        return 'CDEF:%s=%s' % (suffixed(self.vname, index), rpn)

CDEF = CalculationDefinition


class GraphElement(Command):
    '''
    Something drawn for a series: a LINE, AREA or TICK.

    The legend is either literal text or, for configured elements only, a
    dynamic expression evaluated once per source. Whatever follows the
    legend is passed through to rrdtool untouched.
    '''
    refers = True
    keyword = None

    def __init__(self, vname, color=None, legend='', legendExpr=None,
        args=''):
        Command.__init__(self)
        self.vname = vname
        self.color = color
        self.legend = legend
        self.legendExpr = legendExpr
        self.args = args

    def fields(self, legend):
        return [legend, self.args]

    def toArg(self, index=None, legend=None):
        if legend is None:
            legend = escapeColons(self.legend)
        main = '%s:%s' % (self.keyword, suffixed(self.vname, index))
        if self.color is not None:
            main += '#' + self.color
        return main + joinFields(self.fields(legend))


class Line(GraphElement):
    '''
    >>> Line('LINE2', 'ds0a', '0000ff')
    LINE2:ds0a#0000ff
    >>> Line('LINE1', 'ds0a', '00ff00', 'In: bytes', args='STACK').toArg(1)
    'LINE1:ds0aw1#00ff00:In\\\\: bytes:STACK'
    '''
    kind = 'LINE'

    def __init__(self, keyword, vname, color=None, legend='',
        legendExpr=None, args=''):
        GraphElement.__init__(self, vname, color, legend, legendExpr, args)
        self.keyword = keyword

LINE = Line


class Area(GraphElement):
    '''
    >>> Area('ds0a', 'cccccc', 'Raw Router Data', args='STACK')
    AREA:ds0a#cccccc:Raw Router Data:STACK
    '''
    kind = 'AREA'
    keyword = 'AREA'

AREA = Area


class Tick(GraphElement):
    '''
    >>> Tick('failures', 'ff0000', '0.5', 'Failures')
    TICK:failures#ff0000:0.5:Failures
    >>> Tick('failures', 'ff0000', '', '')
    TICK:failures#ff0000
    '''
    kind = 'TICK'
    keyword = 'TICK'

    def __init__(self, vname, color=None, fraction='', legend='',
        legendExpr=None, args=''):
        GraphElement.__init__(self, vname, color, legend, legendExpr, args)
        self.fraction = fraction

    def fields(self, legend):
        return [self.fraction, legend, self.args]

TICK = Tick


class Rule(Command):
    '''
    A horizontal or vertical line at a fixed value. The value is not a
    reference that gets resolved, and rules are drawn once no matter how
    many files were matched.
    '''
    keyword = None

    def __init__(self, value, color=None, legend='', legendExpr=None,
        args=''):
        Command.__init__(self)
        self.value = value
        self.color = color
        self.legend = legend
        self.legendExpr = legendExpr
        self.args = args

    def toArg(self, legend=None):
        if legend is None:
            legend = escapeColons(self.legend)
        main = '%s:%s' % (self.keyword, self.value)
        if self.color is not None:
            main += '#' + self.color
        return main + joinFields([legend, self.args])


class HorizontalRule(Rule):
    '''
    >>> HorizontalRule('100', '0000FF', 'Maximum allowed')
    HRULE:100#0000FF:Maximum allowed
    '''
    kind = 'HRULE'
    keyword = 'HRULE'

HRULE = HorizontalRule


class VerticalRule(Rule):
    '''
    >>> VerticalRule('0', 'FF0000', 'dashed line', args='dashes')
    VRULE:0#FF0000:dashed line:dashes
    '''
    kind = 'VRULE'
    keyword = 'VRULE'

VRULE = VerticalRule


class Shift(Command):
    '''
    >>> Shift('ds0a', '604800').toArg(2)
    'SHIFT:ds0aw2:604800'
    '''
    kind = 'SHIFT'
    refers = True

    def __init__(self, vname, offset):
        Command.__init__(self)
        self.vname = vname
        self.offset = offset

    def toArg(self, index=None):
        return 'SHIFT:%s:%s' % (suffixed(self.vname, index), self.offset)

SHIFT = Shift


class Print(Command):
    '''
    >>> Print('ds0max', '%6.2lf %Sbps')
    PRINT:ds0max:%6.2lf %Sbps
    '''
    kind = 'PRINT'
    refers = True

    def __init__(self, vname, format):
        Command.__init__(self)
        self.vname = vname
        self.format = format

    def toArg(self, index=None):
        return '%s:%s:%s' % (self.kind, suffixed(self.vname, index),
            self.format)

PRINT = Print


class GraphPrint(Print):
    '''
    This is the same as PRINT, but printed inside the graph.

    >>> GraphPrint('ds0max', '%6.2lf %Sbps').toArg(0)
    'GPRINT:ds0maxw0:%6.2lf %Sbps'
    '''
    kind = 'GPRINT'

GPRINT = GraphPrint


class TextElement(Command):
    '''
    COMMENT and TEXTALIGN: a keyword followed by text.

    >>> TextElement('COMMENT', '95th percentile: 12')
    COMMENT:95th percentile\\: 12
    >>> TextElement('TEXTALIGN', 'left')
    TEXTALIGN:left
    '''

    def __init__(self, keyword, legend='', legendExpr=None):
        Command.__init__(self)
        self.kind = self.keyword = keyword
        self.legend = legend
        self.legendExpr = legendExpr

    def toArg(self, legend=None):
        if legend is None:
            legend = escapeColons(self.legend)
        return '%s:%s' % (self.keyword, legend)


def _word(data, stop):
    word, sep, rest = data.partition(stop)
    return word, rest


def _valueColor(data):
    value, sep, color = data.partition('#')
    if not sep:
        color = None
    return value, color


def _parseDef(keyword, element, expr1, expr2):
    vname, element = _word(element, '=')
    path, element = _word(element, ':')
    dsName, cf = _word(element, ':')
    return DataDefinition(vname, path, dsName, cf, pathExpr=expr1,
        dirExpr=expr2)


def _parseVdef(keyword, element, expr1, expr2):
    vname, element = _word(element, '=')
    dsName, rpn = _word(element, ',')
    return VariableDefinition(vname, dsName, rpn)


def _parseCdef(keyword, element, expr1, expr2):
    vname, rpn = _word(element, '=')
    return CalculationDefinition(vname, rpn)


def _parseLine(keyword, element, expr1, expr2):
    target, element = _word(element, ':')
    legend, args = splitQuoted(element, ':')
    vname, color = _valueColor(target)
    return Line(keyword, vname, color, legend, expr1, args)


def _parseArea(keyword, element, expr1, expr2):
    target, element = _word(element, ':')
    legend, args = splitQuoted(element, ':')
    vname, color = _valueColor(target)
    return Area(vname, color, legend, expr1, args)


def _parseTick(keyword, element, expr1, expr2):
    target, element = _word(element, ':')
    fraction, element = _word(element, ':')
    legend, args = splitQuoted(element, ':')
    vname, color = _valueColor(target)
    return Tick(vname, color, fraction, legend, expr1, args)


def _parseRule(keyword, element, expr1, expr2):
    target, element = _word(element, ':')
    legend, args = splitQuoted(element, ':')
    value, color = _valueColor(target)
    if keyword == 'HRULE':
        return HorizontalRule(value, color, legend, expr1, args)
    return VerticalRule(value, color, legend, expr1, args)


def _parseShift(keyword, element, expr1, expr2):
    vname, offset = _word(element, ':')
    return Shift(vname, offset)


def _parsePrint(keyword, element, expr1, expr2):
    vname, format = _word(element, ':')
    if keyword == 'GPRINT':
        return GraphPrint(vname, format)
    return Print(vname, format)


def _parseText(keyword, element, expr1, expr2):
    legend, rest = splitQuoted(element, ':')
    return TextElement(keyword, legend, expr1)


ELEMENTS = (
    (re.compile(r'(DEF):'), _parseDef),
    (re.compile(r'(VDEF):'), _parseVdef),
    (re.compile(r'(CDEF):'), _parseCdef),
    (re.compile(r'(LINE[0-9.]*):'), _parseLine),
    (re.compile(r'(AREA):'), _parseArea),
    (re.compile(r'(TICK):'), _parseTick),
    (re.compile(r'(HRULE|VRULE):'), _parseRule),
    (re.compile(r'(SHIFT):'), _parseShift),
    (re.compile(r'(G?PRINT):'), _parsePrint),
    (re.compile(r'(COMMENT|TEXTALIGN):'), _parseText),
    )


def parseElement(element, expr1=None, expr2=None):
    '''
    Turn one graph element into a command, or return None when the text
    is not an element this module knows about.

    expr1 is a dynamic expression replacing the legend, or the path for a
    DEF. expr2 is only used by DEF, as the directory the path is matched
    against. Both only ever come from the configuration.

    >>> parseElement('DEF:ifOutOctets=monitor*.rrd:ifOutOctets:AVERAGE')
    DEF:ifOutOctets=monitor*.rrd:ifOutOctets:AVERAGE
    >>> parseElement('CDEF:combined=ifOutOctets,1,+').tokens
    [ifOutOctets, 1, +]
    >>> line = parseElement('LINE1:ifOutOctets#00ff00:"Out: Octets":STACK')
    >>> (line.kind, line.vname, line.color, line.legend, line.args)
    ('LINE', 'ifOutOctets', '00ff00', 'Out: Octets', 'STACK')
    >>> parseElement('COMMENT:"Foo: bar"').legend
    'Foo: bar'
    >>> parseElement('title=foo')
    >>> parseElement('def:a=a.rrd:in:AVERAGE')
    >>> parseElement('DEF:bad name=a.rrd:in:AVERAGE')
    '''
    for pattern, parser in ELEMENTS:
        match = pattern.match(element)
        if match:
            try:
                return parser(match.group(1), element[match.end():],
                    expr1, expr2)
            except ValueError:
                return None
    return None


if __name__ == '__main__':
    import doctest
    doctest.testmod()
