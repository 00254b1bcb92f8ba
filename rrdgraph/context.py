class Context(object):
    '''
    The values a request makes available to dynamic expressions.

    variables holds the request properties (server name, method, file
    name and so on), env holds the environment, which the resolver adds
    to as it summarises values across matched sources.

    A derived context shares the environment of its parent, so values
    summarised while resolving one DEF are visible to every source.

    >>> request = Context({'SERVER_NAME': 'example.com'})
    >>> source = request.derive(FILENAME='/rrd/h1.rrd')
    >>> sorted(source.variables.items())
    [('FILENAME', '/rrd/h1.rrd'), ('SERVER_NAME', 'example.com')]
    >>> request.env['HOSTS'] = 'h1'
    >>> source.env['HOSTS']
    'h1'
    '''
    def __init__(self, variables=None, env=None):
        self.variables = dict(variables or {})
        if env is None:
            env = {}
        self.env = env

    def derive(self, **variables):
        merged = dict(self.variables)
        merged.update(variables)
        return Context(merged, self.env)

    def __repr__(self):
        return '<Context %r env=%r>' % (self.variables, self.env)


class Source(object):
    '''
    One concrete, already authorised, RRD file matched by a DEF path.
    The context is the one dynamic legends for this source evaluate in.
    '''
    __slots__ = ['path', 'context']

    def __init__(self, path, context=None):
        self.path = path
        self.context = context

    def __repr__(self):
        return '<Source %s>' % self.path


if __name__ == '__main__':
    import doctest
    doctest.testmod()
