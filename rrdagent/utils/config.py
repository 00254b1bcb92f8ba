import configparser
import os
import shlex

from rrdagent.utils import error
from rrdagent.core.expression import Expression
from rrdgraph.graph import parseElement, validateImageFormat
from rrdgraph.options import parseOption

LOCATION = 'location:'
BACKENDS = ('external', 'bindings')


def _getOpt(get, section, option, default = None):
    res = default
    try:
        res = get(section, option)
    except (configparser.NoOptionError, configparser.NoSectionError):
        if res == None:
            raise error.ConfigError("[%s]::%s" % (section,option))
    except ValueError as e:
        raise error.ConfigError("[%s]::%s" % (section, option), str(e))

    return res


def _getListOpt(get, section, option, separator, default = None,
        allowEmpty = False):
    value = _getOpt(get, section, option, default)

    res = []
    for x in value.split(separator):
        x = x.strip()
        if not allowEmpty and not x:
            continue
        res.append(x)

    return res


def _getLines(get, section, option):
    '''
    Returns the lines of a multi-line option, split into words following
    shell quoting rules.
    '''
    res = []
    for line in _getListOpt(get, section, option, '\n', ''):
        try:
            res.append(shlex.split(line))
        except ValueError as e:
            raise error.ConfigError("[%s]::%s" % (section, option),
                "%s in '%s'" % (e, line))

    return res


def _expression(section, option, source):
    try:
        return Expression(source)
    except error.ExpressionSyntaxError as e:
        raise error.ConfigError("[%s]::%s" % (section, option), str(e))


class Config(object):

    def __init__(self, config_file="RRDAgent.conf"):

        self.file_path = config_file
        # open parser, load config file. Expressions use %{...}, so
        # interpolation is switched off
        parser = configparser.RawConfigParser()
        with open(self.file_path, 'r') as f:
            parser.read_file(f)

        # load config
        self.general = _ConfigGeneral(parser)
        self.webserver = _ConfigWebserver(parser)
        self.locations = []
        for section in parser.sections():
            if section.startswith(LOCATION):
                self.locations.append(_ConfigLocation(parser, section))


class _ConfigGeneral(object):

    def __init__(self, parser):
        self.logpath = _getOpt(
                parser.get, "general", "logpath", "")

        if not self.logpath:
            logpath = os.path.join(os.sep, 'var', 'log', 'RRDAgent')

            if os.path.exists(logpath):
                self.logpath = logpath
            elif os.path.exists(os.path.join(os.getcwd(), 'logs')):
                self.logpath = os.path.join(os.getcwd(), 'logs')

        self.loglevel = _getOpt(
                parser.get, "general", "loglevel", "info")
        self.logsize = _getOpt(
                parser.getint, "general", "logsize", 1024)
        self.logcount = _getOpt(
                parser.getint, "general", "logcount", 5)
        self.logconsole = _getOpt(
                parser.getboolean, "general", "logconsole", True)

        self.backend = _getOpt(
                parser.get, "general", "backend", "external")
        if self.backend not in BACKENDS:
            raise error.ConfigError("[general]::backend",
                "must be one of %s" % ", ".join(BACKENDS))
        self.rrdtool = _getOpt(
                parser.get, "general", "rrdtool", "rrdtool")


class _ConfigWebserver(object):

    def __init__(self, parser):
        self.host = _getOpt(
                parser.get, "webserver", "host", "")
        self.port = _getOpt(
                parser.getint, "webserver", "port", 8080)
        self.backlog = _getOpt(
                parser.getint, "webserver", "backlog", 50)


class _ConfigLocation(object):
    '''
    A [location:/url/path] section, describing the graphs served below
    one URL path.
    '''

    def __init__(self, parser, section):
        self.path = '/' + section[len(LOCATION):].strip().strip('/')

        self.directory = os.path.abspath(_getOpt(
                parser.get, section, "directory"))
        self.graph = _getOpt(
                parser.getboolean, section, "graph", True)

        self.format = _getOpt(parser.get, section, "format", "")
        if self.format:
            try:
                self.format = validateImageFormat(self.format)
            except ValueError as e:
                raise error.ConfigError("[%s]::format" % section, str(e))

        self.wadl = _getOpt(parser.get, section, "wadl", "") or None
        self.allow = _getListOpt(parser.get, section, "allow", "\n", "*")
        self.deny = _getListOpt(parser.get, section, "deny", "\n", "")

        self.options = [self._option(section, words)
            for words in _getLines(parser.get, section, "options")]
        self.elements = [self._element(section, words)
            for words in _getLines(parser.get, section, "elements")]
        self.env = [self._env(section, words)
            for words in _getLines(parser.get, section, "env")]

    def _option(self, section, words):
        if len(words) > 2:
            raise error.ConfigError("[%s]::options" % section,
                "too many values for '%s'" % words[0])
        option = None
        if len(words) == 1:
            option = parseOption(words[0])
        else:
            expression = _expression(section, "options", words[1])
            if expression.isStatic:
                option = parseOption(words[0], words[1])
            else:
                option = parseOption(words[0], words[1], expression)
        if option is None:
            raise error.ConfigError("[%s]::options" % section,
                "'%s' is not a recognised option, or has the wrong number of values" % words[0])
        return option

    def _element(self, section, words):
        if len(words) > 3:
            raise error.ConfigError("[%s]::elements" % section,
                "too many expressions for '%s'" % words[0])
        expressions = [_expression(section, "elements", word)
            for word in words[1:]]
        element = parseElement(words[0], *expressions)
        if element is None:
            raise error.ConfigError("[%s]::elements" % section,
                "'%s' is not a recognised element" % words[0])
        return element

    def _env(self, section, words):
        if len(words) != 2:
            raise error.ConfigError("[%s]::env" % section,
                "expected a name and an expression in '%s'" % " ".join(words))
        return words[0], _expression(section, "env", words[1])
