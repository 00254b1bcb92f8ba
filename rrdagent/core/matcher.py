import fnmatch
import glob
import os

from rrdgraph.context import Source


class Matcher(object):
    '''
    Expands the wildcard path of a DEF into the RRD files it names.

    Only regular files inside the location's directory are returned, and
    of those only the ones matching an allow pattern and no deny pattern.
    Patterns are matched against the path relative to the directory.
    '''

    def __init__(self, log, root, allow=('*',), deny=()):
        '''
        @param log: the logging object
        @param root: the directory files must be found in
        @param allow: glob patterns of files graphs may be drawn from
        @param deny: glob patterns of files graphs may never be drawn from
        '''
        self.log = log
        self.root = os.path.realpath(root)
        self.prefix = self.root.rstrip(os.sep) + os.sep
        self.allow = list(allow)
        self.deny = list(deny)

    def __call__(self, pattern, context, directory=None):
        '''
        Returns the Sources matched by pattern, sorted by path.
        @param pattern: the path of the DEF, may contain wildcards
        @param context: the request context
        @param directory: the directory relative patterns start from,
            the directory of the requested file when not given
        '''
        if directory is None:
            requested = context.variables.get('REQUEST_FILENAME')
            if requested:
                directory = os.path.dirname(requested)
            else:
                directory = self.root

        self.log.debug("Attempting to match wildcard RRD path '%s' against base '%s'"
            % (pattern, directory))

        sources = []
        for path in sorted(glob.glob(os.path.join(glob.escape(directory), pattern))):
            path = os.path.normpath(path)
            if not self.permitted(path):
                self.log.debug("Skipping '%s', access denied" % path)
                continue
            sources.append(Source(path, context.derive(
                FILENAME=path, REQUEST_FILENAME=path)))

        return sources

    def permitted(self, path):
        real = os.path.realpath(path)
        if not os.path.isfile(real):
            return False
        if not real.startswith(self.prefix):
            return False
        relative = os.path.relpath(real, self.root)
        if not any(fnmatch.fnmatchcase(relative, pattern) for pattern in self.allow):
            return False
        return not any(fnmatch.fnmatchcase(relative, pattern) for pattern in self.deny)
