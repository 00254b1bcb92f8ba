class Error(Exception):
    """
    Base class for errors
    """
    def __str__(self):
        return repr(self)


class ConfigError(Error):
    """
    Error in config file
    """
    def __init__(self, identifier, reason=None):
        Error.__init__(self)
        self.identifier = identifier
        self.reason = reason

    def __repr__(self):
        if self.reason:
            return("<ConfigError for parameter \"%s\": %s>"\
                    % (self.identifier, self.reason))
        return("<ConfigError for parameter \"%s\" (wrong or undefined)>"\
                % (self.identifier))


class ConfigFileNotFound(Error):
    '''
    None of the candidate locations held an RRDAgent.conf.
    '''
    def __init__(self, locations):
        Error.__init__(self)
        self.locations = locations

    def __repr__(self):
        return("<RRDAgent.conf not found, looked in: %s>"\
                % (', '.join(self.locations)))


class ExpressionSyntaxError(Error):
    '''
    An expression in the configuration file could not be parsed.
    '''
    def __init__(self, expression, reason):
        Error.__init__(self)
        self.expression = expression
        self.reason = reason

    def __repr__(self):
        return("<Syntax error in expression \"%s\": %s>"\
                % (self.expression, self.reason))
