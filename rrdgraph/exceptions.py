class GraphError(Exception):
    """
    Base class for everything that stops a graph from being compiled or
    rendered.
    """


class RequestError(GraphError):
    """
    The graph description supplied by the client was invalid.
    """


class ServerError(GraphError):
    """
    The graph description was fine, but the environment failed to act on it.
    """


class UnrecognisedTokenError(RequestError):

    def __init__(self, token, message=None):
        if message is None:
            message = "Query was not recognised: %s" % token
        RequestError.__init__(self, message)
        self.token = token


class UnresolvedReferenceError(RequestError):

    def __init__(self, kind, vname, owner=None):
        if owner:
            message = "While parsing %s '%s': '%s' was not found" % (
                kind, owner, vname)
        else:
            message = "While parsing %s: '%s' was not found" % (kind, vname)
        RequestError.__init__(self, message)
        self.kind = kind
        self.vname = vname


class ForbiddenOverrideError(RequestError):
    """
    Raised for a DEF that tries to point the render engine at a daemon.
    The offending value is deliberately left out of the message.
    """

    def __init__(self):
        RequestError.__init__(self,
            "DEF elements must not contain a 'daemon' parameter")


class MultiplicityError(RequestError):

    def __init__(self, vname, operand, expected, found):
        RequestError.__init__(self,
            "CDEF '%s' spans %d sources and cannot use '%s', which spans %d" % (
                vname, expected, operand, found))
        self.vname = vname
        self.operand = operand


class ExpressionError(ServerError):
    """
    A dynamic expression could not be evaluated.
    """


class RenderError(ServerError):
    """
    The render engine refused the argument vector or failed to run.
    """


class ExternalCommandError(RenderError):
    pass
