import sys
from subprocess import Popen, PIPE

from rrdgraph.exceptions import ExternalCommandError


def _cmd(command, args, rrdtool='rrdtool'):
    if sys.platform == 'win32':
        close_fds = False
    else:
        close_fds = True
    command = [rrdtool, command] + list(args)
    process = Popen(command, shell=False, stdout=PIPE, stderr=PIPE,
        stdin=PIPE, close_fds=close_fds)
    (stdout, stderr) = process.communicate()
    if stderr:
        raise ExternalCommandError(stderr.strip().decode('utf-8', 'replace'))
    if process.returncode != 0:
        errmsg = "Return code from '%s %s' was %s." % (
            rrdtool, command[1], process.returncode)
        raise ExternalCommandError(errmsg)
    return stdout


def graph(args, rrdtool='rrdtool'):
    """
    Render a graph by running the rrdtool command line, and return the
    image.

    args is a complete generated argument list. Its first entry names the
    program and is replaced by the rrdtool graph command, while the output
    file is expected to be '-', so that the image is written to stdout.
    Each argument is passed on as is, no shell is involved.
    """
    return _cmd('graph', args[1:], rrdtool)
