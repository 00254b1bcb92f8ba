import os
import shutil
import tempfile
from unittest import TestCase, mock

from twisted.internet import defer
from twisted.web.resource import Resource
from twisted.web.server import NOT_DONE_YET
from twisted.web.test.requesthelper import DummyRequest

from rrdagent.core.expression import Expression
from rrdagent.core.web import GraphResource, mount
from rrdgraph.exceptions import RenderError
from rrdgraph.graph import parseElement
from rrdgraph.options import parseOption


class FakeLocation(object):

    def __init__(self, directory, **kwargs):
        self.path = '/rrd'
        self.directory = directory
        self.graph = True
        self.format = ''
        self.wadl = None
        self.allow = ['*.rrd']
        self.deny = []
        self.options = []
        self.elements = []
        self.env = []
        self.__dict__.update(kwargs)


class GraphResourceTestCase(TestCase):

    def setUp(self):
        self.directory = os.path.realpath(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.directory)
        for name in ('h1.rrd', 'h2.rrd', 'legend.png'):
            with open(os.path.join(self.directory, name), 'w') as f:
                f.write('')
        self.log = mock.Mock()
        self.rendered = []

    def renderer(self, args):
        self.rendered.append(args)
        return b'IMAGE'

    def resource(self, renderer=None, **kwargs):
        location = FakeLocation(self.directory, **kwargs)
        return GraphResource(self.log, location, renderer or self.renderer,
                             defer_render=defer.maybeDeferred)

    def request(self, path, query=b'', method=b'GET'):
        request = DummyRequest(path.strip(b'/').split(b'/'))
        request.method = method
        request.path = path
        request.uri = path
        if query:
            request.uri += b'?' + query
        return request

    def render(self, resource, request):
        result = resource.render(request)
        if result is not NOT_DONE_YET:
            request.write(result)
            request.finish()
        self.assertEqual(request.finished, 1)
        return b''.join(request.written)

    def contentType(self, request):
        return request.responseHeaders.getRawHeaders(b'content-type')[0]

    def test_graph(self):
        request = self.request(b'/rrd/traffic.png',
                               b'DEF:a=*.rrd:in:AVERAGE&LINE1:a%23ff0000:Traffic')
        self.assertEqual(self.render(self.resource(), request), b'IMAGE')
        self.assertEqual(self.contentType(request), b'image/png')
        self.assertEqual(self.rendered, [[
            'rrdgraph', '-', '--imgformat', 'PNG',
            'DEF:aw0=%s/h1.rrd:in:AVERAGE' % self.directory,
            'DEF:aw1=%s/h2.rrd:in:AVERAGE' % self.directory,
            'CDEF:a=aw0,aw1,+',
            'LINE1:aw0#ff0000:Traffic',
            'LINE1:aw1#ff0000:Traffic']])
        self.log.debug.assert_any_call('rrdgraph:0: rrdgraph')
        self.log.debug.assert_any_call('rrdgraph:3: PNG')

    def test_configured(self):
        resource = self.resource(
            format='SVG',
            options=[parseOption('title', '%{env:HOSTS}', Expression('%{env:HOSTS}'))],
            elements=[parseElement('DEF:a=*.rrd:in:AVERAGE'),
                      parseElement('AREA:a#00ff00', Expression('%{basename:%{FILENAME}}'))],
            env=[('HOSTS', Expression('%{basename:%{FILENAME}}'))])
        request = self.request(b'/rrd/legend.png', b'rigid')
        self.assertEqual(self.render(resource, request), b'IMAGE')
        self.assertEqual(self.contentType(request), b'image/svg+xml')
        self.assertEqual(self.rendered[0][4:], [
            '--title', 'h1.rrd,h2.rrd',
            '--rigid',
            'DEF:aw0=%s/h1.rrd:in:AVERAGE' % self.directory,
            'DEF:aw1=%s/h2.rrd:in:AVERAGE' % self.directory,
            'CDEF:a=aw0,aw1,+',
            'AREA:aw0#00ff00:h1.rrd',
            'AREA:aw1#00ff00:h2.rrd'])

    def test_badRequest(self):
        request = self.request(b'/rrd/traffic.png', b'DEF:a=*.rrd:in:AVERAGE&bogus')
        body = self.render(self.resource(), request)
        self.assertEqual(request.responseCode, 400)
        self.assertEqual(body, b'RRD error: Query was not recognised: bogus\n')
        self.assertEqual(self.contentType(request), b'text/plain; charset=utf-8')
        self.assertEqual(self.rendered, [])
        self.assertTrue(self.log.error.called)

    def test_unresolved(self):
        request = self.request(b'/rrd/traffic.png', b'LINE1:a%23ff0000')
        body = self.render(self.resource(), request)
        self.assertEqual(request.responseCode, 400)
        self.assertEqual(body, b"RRD error: While parsing LINE: 'a' was not found\n")

    def test_daemon(self):
        request = self.request(b'/rrd/traffic.png',
                               b'DEF:a=h1.rrd:in:AVERAGE:daemon=evil.example.com')
        body = self.render(self.resource(), request)
        self.assertEqual(request.responseCode, 400)
        self.assertFalse(b'evil' in body)
        self.assertTrue(self.log.error.called)
        for call in self.log.error.call_args_list:
            self.assertFalse('evil' in call[0][0])

    def test_expressionFailure(self):
        resource = self.resource(
            elements=[parseElement('COMMENT:x', Expression('%{REMOTE_USER}'))])
        request = self.request(b'/rrd/traffic.png')
        self.render(resource, request)
        self.assertEqual(request.responseCode, 500)

    def test_renderFailure(self):
        def renderer(args):
            raise RenderError("ERROR: opening 'h1.rrd': No such file")
        request = self.request(b'/rrd/traffic.png', b'COMMENT:x')
        body = self.render(self.resource(renderer), request)
        self.assertEqual(request.responseCode, 500)
        self.assertEqual(body, b"RRD error: ERROR: opening 'h1.rrd': No such file\n")

    def test_clientGone(self):
        request = self.request(b'/rrd/traffic.png', b'COMMENT:x')
        waiting = defer.Deferred()
        resource = self.resource(lambda args: waiting)
        self.assertEqual(resource.render(request), NOT_DONE_YET)
        request.processingFailed(Exception('connection lost'))
        waiting.callback(b'IMAGE')
        self.assertEqual(request.written, [])

    def test_unknownFormat(self):
        request = self.request(b'/rrd/traffic.gif')
        self.render(self.resource(), request)
        self.assertEqual(request.responseCode, 404)

    def test_parentDirectory(self):
        for path in (b'/rrd/../etc/passwd.png', b'/rrd/%2e%2e/x.png', b'/rrd/%ff.png',
                     b'/other/x.png'):
            request = self.request(path)
            self.render(self.resource(), request)
            self.assertEqual(request.responseCode, 404, path)

    def test_staticFile(self):
        with mock.patch('rrdagent.core.web.File') as File:
            File.return_value.render.return_value = b'PNGDATA'
            request = self.request(b'/rrd/legend.png')
            self.assertEqual(self.render(self.resource(), request), b'PNGDATA')
            File.assert_called_once_with(os.path.join(self.directory, 'legend.png'))
        self.assertEqual(self.rendered, [])

    def test_forcedFormat(self):
        with mock.patch('rrdagent.core.web.File') as File:
            request = self.request(b'/rrd/legend.png', b'COMMENT:x')
            self.assertEqual(self.render(self.resource(format='PDF'), request), b'IMAGE')
            self.assertFalse(File.called)
        self.assertEqual(self.contentType(request), b'application/pdf')

    def test_options(self):
        request = self.request(b'/rrd/traffic.png', method=b'OPTIONS')
        body = self.render(self.resource(), request)
        self.assertEqual(self.contentType(request), b'application/vnd.sun.wadl+xml')
        self.assertTrue(b'<wadl:resources base="http://dummy/rrd/traffic.png">' in body)

    def test_optionsConfiguredBase(self):
        request = self.request(b'/rrd/', method=b'OPTIONS')
        body = self.render(self.resource(wadl='http://example.com/rrd?a&b'), request)
        self.assertTrue(b'base="http://example.com/rrd?a&amp;b"' in body)

    def test_requestContext(self):
        request = self.request(b'/rrd/hosts/traffic.png', b'rigid')
        resource = self.resource()
        filename = os.path.join(self.directory, 'hosts', 'traffic.png')
        context = resource.request_context(request, filename, 'hosts/traffic.png', b'rigid')
        self.assertEqual(context.variables['SERVER_NAME'], 'dummy')
        self.assertEqual(context.variables['REQUEST_METHOD'], 'GET')
        self.assertEqual(context.variables['REQUEST_URI'], '/rrd/hosts/traffic.png?rigid')
        self.assertEqual(context.variables['QUERY_STRING'], 'rigid')
        self.assertEqual(context.variables['REQUEST_FILENAME'], filename)
        self.assertEqual(context.variables['DOCUMENT_ROOT'], self.directory)
        self.assertEqual(context.variables['PATH_INFO'], '/hosts/traffic.png')


class MountTestCase(TestCase):

    def test_nested(self):
        root = Resource()
        graphs = Resource()
        self.assertTrue(mount(root, '/a/b/graphs', graphs) is root)
        self.assertTrue(root.children[b'a'].children[b'b'].children[b'graphs'] is graphs)
        other = Resource()
        mount(root, '/a/other', other)
        self.assertTrue(root.children[b'a'].children[b'other'] is other)

    def test_root(self):
        root = Resource()
        child = Resource()
        mount(root, '/static', child)
        graphs = Resource()
        self.assertTrue(mount(root, '/', graphs) is graphs)
        self.assertTrue(graphs.children[b'static'] is child)
