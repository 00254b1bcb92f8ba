from unittest import TestCase

from rrdgraph import graph
from rrdgraph.graph import parseElement


class ParseElementTestCase(TestCase):

    def test_def(self):
        element = parseElement('DEF:a=/rrd/*.rrd:ifInOctets:AVERAGE')
        self.assertEqual(element.kind, 'DEF')
        self.assertEqual(element.vname, 'a')
        self.assertEqual(element.path, '/rrd/*.rrd')
        self.assertEqual(element.dsName, 'ifInOctets')
        self.assertEqual(element.cf, 'AVERAGE')
        self.assertEqual(element.sources, [])
        self.assertEqual(element.multiplicity, 0)
        self.assertTrue(element.backing is None)

    def test_defRemainderIsCf(self):
        element = parseElement('DEF:a=x.rrd:in:AVERAGE:step=60:start=-1d')
        self.assertEqual(element.cf, 'AVERAGE:step=60:start=-1d')

    def test_defIncomplete(self):
        self.assertTrue(parseElement('DEF:a=x.rrd') is None)
        self.assertTrue(parseElement('DEF:=x.rrd:in:AVERAGE') is None)

    def test_defExpressions(self):
        element = parseElement('DEF:a=x.rrd:in:AVERAGE', 'path', 'dir')
        self.assertEqual(element.pathExpr, 'path')
        self.assertEqual(element.dirExpr, 'dir')

    def test_vdef(self):
        element = parseElement('VDEF:amax=a,MAXIMUM')
        self.assertEqual((element.kind, element.vname, element.dsName,
            element.rpn), ('VDEF', 'amax', 'a', 'MAXIMUM'))

    def test_vdefPercentile(self):
        element = parseElement('VDEF:a95=a,95,PERCENT')
        self.assertEqual(element.rpn, '95,PERCENT')

    def test_cdef(self):
        element = parseElement('CDEF:bits=a,,8,*')
        self.assertEqual(element.kind, 'CDEF')
        self.assertEqual([token.text for token in element.tokens],
            ['a', '8', '*'])
        self.assertFalse(any(token.isReference for token in element.tokens))

    def test_lineWidths(self):
        for keyword in ('LINE', 'LINE1', 'LINE2', 'LINE1.5'):
            element = parseElement('%s:a#ff0000:Traffic' % keyword)
            self.assertEqual(element.kind, 'LINE')
            self.assertEqual(element.keyword, keyword)
            self.assertEqual(element.toArg(), '%s:a#ff0000:Traffic' % keyword)

    def test_lineWithoutColour(self):
        element = parseElement('LINE1:a')
        self.assertEqual(element.vname, 'a')
        self.assertTrue(element.color is None)
        self.assertEqual(element.toArg(), 'LINE1:a')

    def test_lineTrailingArgs(self):
        element = parseElement('LINE1:a#ff0000:"In: bytes":STACK:dashes=5')
        self.assertEqual(element.legend, 'In: bytes')
        self.assertEqual(element.args, 'STACK:dashes=5')
        self.assertEqual(element.toArg(),
            'LINE1:a#ff0000:In\\: bytes:STACK:dashes=5')

    def test_area(self):
        element = parseElement('AREA:a#00ff0080::STACK')
        self.assertEqual((element.kind, element.color, element.legend,
            element.args), ('AREA', '00ff0080', '', 'STACK'))
        self.assertEqual(element.toArg(), 'AREA:a#00ff0080::STACK')

    def test_tick(self):
        element = parseElement('TICK:fail#ff0000:0.2:Failures')
        self.assertEqual((element.kind, element.fraction, element.legend),
            ('TICK', '0.2', 'Failures'))

    def test_rules(self):
        hrule = parseElement('HRULE:100#0000ff:Limit')
        self.assertEqual((hrule.kind, hrule.value, hrule.color),
            ('HRULE', '100', '0000ff'))
        vrule = parseElement('VRULE:1300000000#ff0000')
        self.assertEqual(vrule.toArg(), 'VRULE:1300000000#ff0000')

    def test_shiftAndPrints(self):
        self.assertEqual(parseElement('SHIFT:a:86400').offset, '86400')
        printElement = parseElement('PRINT:amax:%6.2lf')
        self.assertEqual((printElement.kind, printElement.vname,
            printElement.format), ('PRINT', 'amax', '%6.2lf'))
        gprint = parseElement('GPRINT:amax:Max\\: %6.2lf')
        self.assertEqual(gprint.kind, 'GPRINT')
        self.assertEqual(gprint.format, 'Max\\: %6.2lf')

    def test_text(self):
        comment = parseElement("COMMENT:'Generated at 10:00'")
        self.assertEqual(comment.kind, 'COMMENT')
        self.assertEqual(comment.legend, 'Generated at 10:00')
        self.assertEqual(comment.toArg(), 'COMMENT:Generated at 10\\:00')
        self.assertEqual(parseElement('TEXTALIGN:center').toArg(),
            'TEXTALIGN:center')

    def test_legendExpression(self):
        element = parseElement('LINE1:a#ff0000:ignored', 'legend')
        self.assertEqual(element.legendExpr, 'legend')

    def test_unknown(self):
        for text in ('', 'DEFINE:a', 'line1:a#ff0000', 'AREA', 'XPORT:a',
            'LINEX:a'):
            self.assertTrue(parseElement(text) is None, text)

    def test_clone(self):
        element = parseElement('CDEF:b=a,8,*')
        element.multiplicity = 2
        element.backing = 0
        element.tokens[0].isReference = True
        other = element.clone()
        self.assertEqual(other.multiplicity, 0)
        self.assertTrue(other.backing is None)
        self.assertFalse(other.tokens[0].isReference)
        self.assertTrue(element.tokens[0].isReference)


class FormatTestCase(TestCase):

    def test_contentTypes(self):
        self.assertEqual(graph.contentType('PNG'), 'image/png')
        self.assertEqual(graph.contentType('svg'), 'image/svg+xml')
        self.assertEqual(graph.contentType('JSONTIME'), 'application/json')
        self.assertEqual(graph.contentType('TSV'), 'text/tab-separated-values')
        self.assertEqual(len(graph.FORMATS), 11)

    def test_formatFromSuffix(self):
        self.assertEqual(graph.formatFromSuffix('/rrd/a.b/graph.pdf'), 'PDF')
        self.assertTrue(graph.formatFromSuffix('/rrd/a.png/graph') is None)
        self.assertTrue(graph.formatFromSuffix('graph.gif') is None)

    def test_validateImageFormat(self):
        self.assertEqual(graph.validateImageFormat('xmlenum'), 'XMLENUM')
        self.assertRaises(ValueError, graph.validateImageFormat, 'GIF')
