#!/usr/bin/env python

from setuptools import setup

version = '0.01'

data = dict(
    name =          'RRDAgent',
    version =       version,
    description =   'RRDAgent serves rrdtool graphs described in the query string of a URL.',
    packages =      ['rrdagent', 'rrdagent.core', 'rrdagent.utils',
                     'rrdgraph', 'rrdgraph.util', 'rrdgraph.backend'],
    scripts =       ['RRDAgent.py'],
    data_files =    [('share/RRDAgent', ['RRDAgent.conf'])],
    install_requires = ['Twisted'],
    extras_require = {
        'bindings': ['rrdtool'],
        'test': ['pytest'],
    },
    )


setup(**data)
