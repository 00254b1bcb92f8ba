"""
Render graphs through the rrdtool Python bindings rather than the
command line. The bindings are not thread safe, callers have to make
sure only one graph is rendered at a time.
"""
import rrdtool

from rrdgraph.exceptions import RenderError


def _cmd(command, args):
    function = getattr(rrdtool, command)
    try:
        return function(*args)
    except rrdtool.OperationalError as error:
        raise RenderError(str(error))


def graph(args):
    """
    Render a graph from a complete generated argument list and return
    the image. The output file must be '-', which makes graphv hand the
    image back in its result rather than writing it to disk.
    """
    info = _cmd('graphv', args[1:])
    return info['image']
