import os
import sys
from urllib.parse import unquote_to_bytes
from xml.sax.saxutils import quoteattr

from twisted.internet import defer, reactor, threads
from twisted.internet.error import CannotListenError
from twisted.web.resource import Resource
from twisted.web.server import NOT_DONE_YET, Site
from twisted.web.static import File

from rrdagent.core.expression import evaluate
from rrdagent.core.matcher import Matcher
from rrdgraph.context import Context
from rrdgraph.exceptions import RequestError, ServerError
from rrdgraph.generator import generate
from rrdgraph.graph import contentType, formatFromSuffix
from rrdgraph.resolver import resolve
from rrdgraph.spec import assemble

WADL = '''<?xml version="1.0" encoding="UTF-8"?>
<wadl:application xmlns:wadl="http://wadl.dev.java.net/2009/02"
                  xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
                  xsi:schemaLocation="http://wadl.dev.java.net/2009/02 file:wadl.xsd">
 <wadl:resources base=%s>
  <wadl:resource path="/">
   <wadl:method name="GET" id="">
   </wadl:method>
  </wadl:resource>
 </wadl:resources>
</wadl:application>
'''


def _text(value):
    if isinstance(value, bytes):
        return value.decode('utf-8', 'replace')
    return value


def mount(root, path, resource):
    '''
    Place resource at the URL path below root, creating empty resources
    for the path segments in between.
    @return: the new root, which is resource itself for the path "/"
    '''
    segments = [segment for segment in path.split('/') if segment]
    if not segments:
        for name, child in root.children.items():
            resource.putChild(name, child)
        return resource

    parent = root
    for segment in segments[:-1]:
        name = segment.encode('utf-8')
        child = parent.children.get(name)
        if child is None:
            child = Resource()
            parent.putChild(name, child)
        parent = child
    parent.putChild(segments[-1].encode('utf-8'), resource)
    return root


class Web(object):
    '''
    This class provides the web interface of RRDAgent, serving graphs for
    every configured location.
    '''

    def __init__(self, log, host, port, backlog, locations, renderer):
        '''
        Initialize the web interface.
        @param host: the interface the web server should listen on
        @param port: the port on which the web server should listen
        @param backlog: size of the listen queue
        @param locations: the configured locations
        @param renderer: called with a generated argument list in a worker thread, returns the image
        '''
        self.host = host
        self.port = port
        self.backlog = backlog
        self.log = log

        # rrdtool is not thread safe, only one graph is rendered at a time
        lock = defer.DeferredLock()

        root = Resource()
        for location in sorted(locations, key=lambda location: location.path):
            if location.graph:
                resource = GraphResource(log, location, renderer, lock)
            else:
                resource = File(location.directory)
            self.log.debug("--> Serving %s from %s" % (location.path, location.directory))
            root = mount(root, location.path, resource)

        self.site = Site(root)

        try:
            reactor.listenTCP(self.port, self.site, self.backlog, self.host)
        except CannotListenError as e:
            log.critical("--> %s" % e)
            sys.exit(1)


class GraphResource(Resource):
    '''
    Serves the graphs of one location. Files that exist below the
    location's directory are served as they are, any other request for a
    file with the suffix of an image format is drawn by rrdtool.
    '''

    def __init__(self, log, location, renderer, lock=None,
                 defer_render=threads.deferToThread):
        '''
        @param location: the configured location
        @param renderer: called with the argument list, returns the image
        @param lock: the DeferredLock all rendering is serialised through
        @param defer_render: runs the renderer, in a worker thread by default
        '''
        Resource.__init__(self)
        self.log = log
        self.location = location
        self.renderer = renderer
        self.lock = lock or defer.DeferredLock()
        self.defer_render = defer_render
        self.matcher = Matcher(log, location.directory, location.allow, location.deny)

    def getChild(self, name, request):
        # the whole path is looked at in render_GET
        return self

    def relative_path(self, request):
        '''
        Returns the request path below the location, or None when it
        does not name something below the location's directory.
        '''
        try:
            path = unquote_to_bytes(request.path).decode('utf-8')
        except UnicodeDecodeError:
            return None
        prefix = self.location.path.rstrip('/')
        if path != prefix and not path.startswith(prefix + '/'):
            return None
        segments = [segment for segment in path[len(prefix):].split('/') if segment]
        if '..' in segments or '.' in segments or '\0' in path:
            return None
        return '/'.join(segments)

    def request_context(self, request, filename, path, query):
        client = request.getClientAddress()
        return Context({
            'SERVER_NAME': _text(request.getRequestHostname()),
            'SERVER_PORT': str(getattr(request.getHost(), 'port', '')),
            'REQUEST_METHOD': _text(request.method),
            'REQUEST_URI': _text(request.uri),
            'QUERY_STRING': _text(query),
            'REMOTE_ADDR': str(getattr(client, 'host', '')),
            'REQUEST_FILENAME': filename,
            'FILENAME': filename,
            'DOCUMENT_ROOT': self.location.directory,
            'PATH_INFO': '/' + path,
            })

    def error(self, request, code, message):
        request.setResponseCode(code)
        request.setHeader(b'content-type', b'text/plain; charset=utf-8')
        return ("RRD error: %s\n" % message).encode('utf-8')

    def compile(self, request, filename, path, format, query):
        '''
        Builds the rrdgraph argument list for the request.
        '''
        context = self.request_context(request, filename, path, query)
        spec = assemble(self.location.options, self.location.elements, query, format)
        resolve(spec, self.matcher, context, self.location.env, evaluate)
        return generate(spec, context, evaluate)

    def render_GET(self, request):
        path = self.relative_path(request)
        if path is None:
            return self.error(request, 404, "The requested graph was not found")

        filename = os.path.join(self.location.directory, path)
        if not self.location.format and os.path.isfile(filename):
            return File(filename).render(request)

        format = self.location.format or formatFromSuffix(filename)
        if format is None:
            return self.error(request, 404,
                "'%s' does not end in the name of a graph format" % path)

        query = request.uri.partition(b'?')[2]
        try:
            args = self.compile(request, filename, path, format, query)
        except RequestError as e:
            self.log.error("--> Bad graph request for %s: %s" % (_text(request.path), e))
            return self.error(request, 400, e)
        except ServerError as e:
            self.log.error("--> Graph request for %s failed: %s" % (_text(request.path), e))
            return self.error(request, 500, e)

        for index, arg in enumerate(args):
            self.log.debug("rrdgraph:%d: %s" % (index, arg))

        request.setHeader(b'content-type', contentType(format).encode('ascii'))

        lost = []
        request.notifyFinish().addErrback(lost.append)

        d = self.lock.run(self.defer_render, self.renderer, args)
        d.addCallbacks(self._rendered, self._failed,
                       callbackArgs=(request, lost), errbackArgs=(request, lost))
        return NOT_DONE_YET

    def _rendered(self, image, request, lost):
        if lost:
            return
        request.write(image)
        request.finish()

    def _failed(self, failure, request, lost):
        self.log.error("--> Rendering %s failed: %s" % (_text(request.path), failure.getErrorMessage()))
        if lost:
            return
        request.write(self.error(request, 500, failure.getErrorMessage()))
        request.finish()

    def render_OPTIONS(self, request):
        base = self.location.wadl
        if not base:
            base = "http://%s%s" % (_text(request.getRequestHostname()),
                                    _text(request.uri.partition(b'?')[0]))
        request.setHeader(b'content-type', b'application/vnd.sun.wadl+xml')
        return (WADL % quoteattr(base)).encode('utf-8')
