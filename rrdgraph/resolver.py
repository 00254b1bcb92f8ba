from rrdgraph.context import Context, Source
from rrdgraph.exceptions import ExpressionError, UnresolvedReferenceError


class Resolver(object):
    """
    Walks the commands of a GraphSpec once, in order, linking every
    reference to the definition visible at that point and working out
    how many RRD files stand behind each command.

    @param matcher: called as matcher(path, context, directory) for each
        DEF, returning the ordered list of authorised files (paths or
        Source objects) the path matches. directory is None unless the
        DEF was configured with a directory expression.
    @param context: the request Context. Values summarised from the
        environment are stored in its env.
    @param environment: (name, expression) pairs, each evaluated against
        every source matched by a DEF. The distinct non-empty results are
        joined with commas into context.env[name].
    @param evaluate: called as evaluate(expression, context) for dynamic
        paths and environment values.
    """

    def __init__(self, matcher, context=None, environment=None,
        evaluate=None):
        self.matcher = matcher
        if context is None:
            context = Context()
        self.context = context
        self.environment = list(environment or [])
        self.evaluate = evaluate
        self.resolvers = {
            'DEF': self._resolveDef,
            'VDEF': self._resolveVdef,
            'CDEF': self._resolveCdef,
            }

    def resolve(self, spec):
        spec.names = {}
        for index, command in enumerate(spec.commands):
            if command.kind in self.resolvers:
                self.resolvers[command.kind](spec, index, command)
            elif command.refers:
                self._resolveReference(spec, command)
        return spec

    def _evaluate(self, expression, context):
        if self.evaluate is None:
            raise ExpressionError(
                "No evaluator available for expression '%s'" % expression)
        return self.evaluate(expression, context)

    def _source(self, source):
        if isinstance(source, Source):
            if source.context is None:
                source.context = self.context.derive(
                    FILENAME=source.path, REQUEST_FILENAME=source.path)
            return source
        return Source(source, self.context.derive(
            FILENAME=source, REQUEST_FILENAME=source))

    def _summarise(self, sources):
        for name, expression in self.environment:
            values = []
            for source in sources:
                value = self._evaluate(expression, source.context)
                if value and value not in values:
                    values.append(value)
            if values:
                self.context.env[name] = ','.join(values)

    def _inherit(self, spec, command, index):
        target = spec.commands[index]
        command.backing = target.backing
        command.multiplicity = target.multiplicity

    def _resolveDef(self, spec, index, command):
        path = command.path
        if command.pathExpr is not None:
            path = self._evaluate(command.pathExpr, self.context)
        directory = None
        if command.dirExpr is not None:
            directory = self._evaluate(command.dirExpr, self.context)

        command.sources = [self._source(source)
            for source in self.matcher(path, self.context, directory)]
        command.multiplicity = len(command.sources)
        command.backing = index
        self._summarise(command.sources)
        spec.names[command.vname] = index

    def _resolveVdef(self, spec, index, command):
        target = spec.names.get(command.dsName)
        if target is None:
            raise UnresolvedReferenceError('VDEF', command.dsName,
                command.vname)
        self._inherit(spec, command, target)
        spec.names[command.vname] = index

    def _resolveCdef(self, spec, index, command):
        anchored = False
        for token in command.tokens:
            target = spec.names.get(token.text)
            if target is None:
                continue
            token.isReference = True
            token.kind = spec.commands[target].kind
            token.backing = spec.commands[target].backing
            token.multiplicity = spec.commands[target].multiplicity
            if not anchored:
                self._inherit(spec, command, target)
                anchored = True
        # a CDEF made only of constants stays at multiplicity 0
        spec.names[command.vname] = index

    def _resolveReference(self, spec, command):
        target = spec.names.get(command.vname)
        if target is None:
            raise UnresolvedReferenceError(command.kind, command.vname)
        self._inherit(spec, command, target)


def resolve(spec, matcher, context=None, environment=None, evaluate=None):
    '''
    Resolve spec in place and return it. See Resolver.

    >>> from rrdgraph.spec import assemble
    >>> spec = assemble([], [], 'DEF:a=*.rrd:in:AVERAGE&LINE1:a#00ff00')
    >>> spec = resolve(spec, lambda path, context, directory:
    ...     ['h1.rrd', 'h2.rrd'])
    >>> [(c.kind, c.backing, c.multiplicity) for c in spec.commands]
    [('DEF', 0, 2), ('LINE', 0, 2)]
    >>> resolve(assemble([], [], 'GPRINT:b:%.1f'), None)
    Traceback (most recent call last):
    rrdgraph.exceptions.UnresolvedReferenceError: While parsing GPRINT: 'b' was not found
    '''
    return Resolver(matcher, context, environment, evaluate).resolve(spec)


if __name__ == '__main__':
    import doctest
    doctest.testmod()
