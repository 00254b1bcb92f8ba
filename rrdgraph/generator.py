from rrdgraph.context import Context
from rrdgraph.exceptions import (ExpressionError, ForbiddenOverrideError,
    MultiplicityError)
from rrdgraph.graph import suffixed
from rrdgraph.util import escapeColons

PROGRAM = 'rrdgraph'
# write the image to stdout, or to memory for the bindings
OUTPUT = '-'

GRAPHICAL = ('LINE', 'AREA', 'TICK')
PRINTS = ('PRINT', 'GPRINT')


def groupCommands(commands):
    '''
    Pair every command with the PRINT and GPRINT commands it absorbs.

    A LINE, AREA or TICK drawn for more than one file takes along the
    PRINT and GPRINT commands directly after it that share its backing
    DEF, so that each file's prints follow that file's line. Every other
    command stands alone.

    Returns a list of (command, absorbed) tuples.
    '''
    groups = []
    position = 0
    while position < len(commands):
        owner = commands[position]
        position += 1
        absorbed = []
        if owner.kind in GRAPHICAL and owner.multiplicity > 1:
            while position < len(commands):
                follower = commands[position]
                if follower.kind not in PRINTS or \
                    follower.backing != owner.backing:
                    break
                absorbed.append(follower)
                position += 1
        groups.append((owner, absorbed))
    return groups


def aggregate(vname, count):
    '''
    The RPN expression adding up every per file variant of vname.

    >>> aggregate('a', 2)
    'aw0,aw1,+'
    >>> aggregate('a', 4)
    'aw0,aw1,+,aw2,+,aw3,+'
    '''
    terms = [suffixed(vname, 0)]
    for index in range(1, count):
        terms.append('%s,+' % suffixed(vname, index))
    return ','.join(terms)


class Generator(object):
    """
    Turns a resolved GraphSpec into the argument list for rrdgraph.

    A command backed by no file produces nothing, one backed by a single
    file produces its literal form, and one backed by N files produces N
    variants with suffixed names. A DEF over N files is followed by a
    CDEF adding up the variants under the DEF's own name.

    @param context: the request Context, used for dynamic options and for
        the legends of rules and comments.
    @param evaluate: called as evaluate(expression, context) for every
        dynamic option value and legend.
    """

    def __init__(self, spec, context=None, evaluate=None):
        self.spec = spec
        if context is None:
            context = Context()
        self.context = context
        self.evaluate = evaluate
        self.generators = {
            'DEF': self._generateDef,
            'VDEF': self._generateVariable,
            'CDEF': self._generateCdef,
            'LINE': self._generateGraphical,
            'AREA': self._generateGraphical,
            'TICK': self._generateGraphical,
            'SHIFT': self._generateVariable,
            'PRINT': self._generateVariable,
            'GPRINT': self._generateVariable,
            'HRULE': self._generateStatic,
            'VRULE': self._generateStatic,
            'COMMENT': self._generateStatic,
            'TEXTALIGN': self._generateStatic,
            }

    def generate(self):
        args = [PROGRAM, OUTPUT, '--imgformat', self.spec.format]
        for option in self.spec.options:
            value = None
            if option.isDynamic:
                value = self._evaluate(option.expression, self.context)
            args.extend(option.toArgs(value))
        for command, absorbed in groupCommands(self.spec.commands):
            args.extend(self.generators[command.kind](command, absorbed))
        return args

    def _evaluate(self, expression, context):
        if self.evaluate is None:
            raise ExpressionError(
                "No evaluator available for expression '%s'" % expression)
        return self.evaluate(expression, context)

    def _legend(self, command, context):
        if command.legendExpr is None:
            return None
        return escapeColons(self._evaluate(command.legendExpr, context))

    def _sources(self, command):
        if command.backing is None:
            return []
        return self.spec.commands[command.backing].sources

    def _contextOf(self, source):
        if source.context is None:
            return self.context
        return source.context

    def _generateDef(self, command, absorbed):
        if command.hasDaemon():
            raise ForbiddenOverrideError()
        if command.multiplicity == 1:
            return [command.toArg(path=command.sources[0].path)]
        args = []
        if command.multiplicity > 1:
            for index, source in enumerate(command.sources):
                args.append(command.toArg(index, path=source.path))
            args.append('CDEF:%s=%s' % (command.vname,
                aggregate(command.vname, command.multiplicity)))
        return args

    def _generateVariable(self, command, absorbed):
        if command.multiplicity == 1:
            return [command.toArg()]
        if command.multiplicity > 1:
            return [command.toArg(index)
                for index in range(command.multiplicity)]
        return []

    def _generateCdef(self, command, absorbed):
        if command.multiplicity == 0:
            return []
        for token in command.tokens:
            if token.isReference and \
                not self._usable(token, command.multiplicity):
                raise MultiplicityError(command.vname, token.text,
                    command.multiplicity, token.multiplicity)
        if command.multiplicity == 1:
            return [command.toArg()]
        args = []
        for index in range(command.multiplicity):
            rpn = ','.join(self._operand(token, index)
                for token in command.tokens)
            args.append(command.toArg(index, rpn))
        return args

    def _usable(self, token, count):
        '''
        Whether the series an operand names exists in the output in a form
        a CDEF emitted count times can use: once per source under suffixed
        names, or once under its own name. Only a DEF over several sources
        also emits a combined series under its own name.
        '''
        if token.multiplicity == 1:
            return True
        if count > 1:
            return token.multiplicity == count
        return token.multiplicity > 1 and token.kind == 'DEF'

    def _operand(self, token, index):
        if token.isReference and token.multiplicity > 1:
            return suffixed(token.text, index)
        return token.text

    def _generateGraphical(self, command, absorbed):
        sources = self._sources(command)
        if command.multiplicity == 1:
            legend = self._legend(command, self._contextOf(sources[0]))
            return [command.toArg(legend=legend)]
        args = []
        if command.multiplicity > 1:
            for index, source in enumerate(sources):
                legend = self._legend(command, self._contextOf(source))
                args.append(command.toArg(index, legend))
                for follower in absorbed:
                    args.append(follower.toArg(index))
        return args

    def _generateStatic(self, command, absorbed):
        return [command.toArg(self._legend(command, self.context))]


def generate(spec, context=None, evaluate=None):
    '''
    Generate the rrdgraph argument list for a resolved spec.

    >>> from rrdgraph.resolver import resolve
    >>> from rrdgraph.spec import assemble
    >>> spec = assemble([], [],
    ...     'DEF:a=*.rrd:in:AVERAGE&LINE1:a#00ff00:Traffic&title=Hosts')
    >>> spec = resolve(spec, lambda path, context, directory:
    ...     ['h1.rrd', 'h2.rrd'])
    >>> for arg in generate(spec):
    ...     print(arg)
    rrdgraph
    -
    --imgformat
    PNG
    --title
    Hosts
    DEF:aw0=h1.rrd:in:AVERAGE
    DEF:aw1=h2.rrd:in:AVERAGE
    CDEF:a=aw0,aw1,+
    LINE1:aw0#00ff00:Traffic
    LINE1:aw1#00ff00:Traffic
    '''
    return Generator(spec, context, evaluate).generate()


if __name__ == '__main__':
    import doctest
    doctest.testmod()
