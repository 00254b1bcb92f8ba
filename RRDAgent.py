#!/usr/bin/env python
import functools
import sys
from rrdagent.utils.config import Config
from rrdagent import config_file
from rrdagent.core.web import Web
from rrdagent.utils.log import Logging
from twisted.internet import reactor


class MainWrapper(object):
    '''
    This is the main wrapper for RRDAgent, it sets up logging, picks the
    rrdtool backend and starts the web server.
    '''
    def __init__(self, config):
        self.config = config

    def renderer(self):
        '''
        Returns the function graphs are rendered with.
        '''
        if self.config.general.backend == 'bindings':
            from rrdgraph.backend import bindings
            return bindings.graph

        from rrdgraph.backend import external
        return functools.partial(external.graph, rrdtool=self.config.general.rrdtool)

    def start(self):
        config = self.config

        self.log = Logging("RRDAgent", config.general.logpath, config.general.logsize,
                           config.general.logcount, config.general.logconsole)
        self.log.set_level(config.general.loglevel)

        self.log.debug("Using the %s rrdtool backend..." % config.general.backend)
        renderer = self.renderer()

        if not config.locations:
            self.log.warning("No [location:...] sections configured, no graphs will be served")

        self.log.debug("Starting RRDAgent web server...")
        Web(self.log, config.webserver.host, config.webserver.port,
            config.webserver.backlog, config.locations, renderer)

        reactor.run()
        return True


if __name__ == '__main__':

    if len(sys.argv) > 1:
        config = Config(sys.argv[1])
    else:
        config = Config(config_file())

    main = MainWrapper(config)
    main.start()
