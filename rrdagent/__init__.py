import os
from rrdagent.utils.error import ConfigFileNotFound

"""
Locates the RRDAgent configuration file.
"""

def config_file():
    '''
    Returns the first RRDAgent.conf found in /etc or the current working
    directory.
    '''
    candidates = [os.path.join(os.sep, 'etc', 'RRDAgent.conf'),
                  os.path.join(os.getcwd(), 'RRDAgent.conf')]

    for candidate in candidates:
        if os.path.exists(candidate):
            return candidate
    raise ConfigFileNotFound(candidates)
