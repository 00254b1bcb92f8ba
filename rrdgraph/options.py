VALUE_REQUIRED = 'required'
VALUE_FORBIDDEN = 'forbidden'

# the rrdgraph options a graph may set, and whether each takes a value
OPTIONS = {
    'alt-autoscale': VALUE_FORBIDDEN,
    'alt-autoscale-max': VALUE_FORBIDDEN,
    'alt-autoscale-min': VALUE_FORBIDDEN,
    'alt-y-grid': VALUE_FORBIDDEN,
    'base': VALUE_REQUIRED,
    'border': VALUE_REQUIRED,
    'color': VALUE_REQUIRED,
    'disable-rrdtool-tag': VALUE_FORBIDDEN,
    'dynamic-labels': VALUE_FORBIDDEN,
    'end': VALUE_REQUIRED,
    'font': VALUE_REQUIRED,
    'font-render-mode': VALUE_REQUIRED,
    'font-smoothing-threshold': VALUE_REQUIRED,
    'force-rules-legend': VALUE_FORBIDDEN,
    'full-size-mode': VALUE_FORBIDDEN,
    'graph-render-mode': VALUE_REQUIRED,
    'grid-dash': VALUE_REQUIRED,
    'height': VALUE_REQUIRED,
    'interlaced': VALUE_FORBIDDEN,
    'lazy': VALUE_FORBIDDEN,
    'left-axis-format': VALUE_REQUIRED,
    'legend-direction': VALUE_REQUIRED,
    'legend-position': VALUE_REQUIRED,
    'logarithmic': VALUE_FORBIDDEN,
    'lower-limit': VALUE_REQUIRED,
    'no-gridfit': VALUE_FORBIDDEN,
    'no-legend': VALUE_FORBIDDEN,
    'only-graph': VALUE_FORBIDDEN,
    'pango-markup': VALUE_FORBIDDEN,
    'right-axis': VALUE_REQUIRED,
    'right-axis-format': VALUE_REQUIRED,
    'right-axis-label': VALUE_REQUIRED,
    'rigid': VALUE_FORBIDDEN,
    'slope-mode': VALUE_FORBIDDEN,
    'start': VALUE_REQUIRED,
    'step': VALUE_REQUIRED,
    'tabwidth': VALUE_REQUIRED,
    'title': VALUE_REQUIRED,
    'units': VALUE_REQUIRED,
    'units-exponent': VALUE_REQUIRED,
    'units-length': VALUE_REQUIRED,
    'upper-limit': VALUE_REQUIRED,
    'use-nan-for-all-missing-data': VALUE_FORBIDDEN,
    'vertical-label': VALUE_REQUIRED,
    'watermark': VALUE_REQUIRED,
    'width': VALUE_REQUIRED,
    'x-grid': VALUE_REQUIRED,
    'y-grid': VALUE_REQUIRED,
    'zoom': VALUE_REQUIRED,
    }


class Option(object):
    '''
    A single rrdgraph option, such as --title.

    A request supplies literal values. Configured options may instead
    carry an expression, evaluated against the request when the argument
    list is generated; value then holds the expression's source text.

    >>> Option('title', 'Traffic')
    --title Traffic
    >>> Option('rigid').toArgs()
    ['--rigid']
    >>> Option('title', 'Traffic').isDynamic
    False
    '''
    def __init__(self, key, value=None, expression=None):
        self.key = key
        self.value = value
        self.expression = expression

    @property
    def isDynamic(self):
        return self.expression is not None

    def takesValue(self):
        return OPTIONS[self.key] == VALUE_REQUIRED

    def toArgs(self, value=None):
        if value is None:
            value = self.value
        if not self.takesValue():
            return ['--%s' % self.key]
        return ['--%s' % self.key, value]

    def __repr__(self):
        return ' '.join(self.toArgs())


def parseOption(key, value=None, expression=None):
    '''
    Check a key and its value against the option table, returning an
    Option, or None when the key is unknown or the value does not fit.

    >>> parseOption('title', 'Traffic')
    --title Traffic
    >>> parseOption('rigid')
    --rigid
    >>> parseOption('rigid', 'yes')
    >>> parseOption('title')
    >>> parseOption('daemon', 'unix:/tmp/rrdcached.sock')
    '''
    arity = OPTIONS.get(key)
    if arity is None:
        return None
    hasValue = value is not None or expression is not None
    if arity == VALUE_REQUIRED and not hasValue:
        return None
    if arity == VALUE_FORBIDDEN and hasValue:
        return None
    return Option(key, value, expression)


if __name__ == '__main__':
    import doctest
    doctest.testmod()
