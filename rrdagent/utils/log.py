import os
import logging
import logging.handlers
import sys
from twisted.python import log as twisted_log

LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
    'critical': logging.CRITICAL,
    'none': logging.NOTSET,
    }


class Logging(object):
    '''
    This class provides generic logging facilities for RRDAgent.
    Messages are sent through the Twisted log, which hands them on to the
    Python logging module.
    '''

    def __init__(self, name, logpath=None, maxkbytes=1024, count=5, console=True):
        '''
        @param name: the name of the logfile
        @param logpath: the directory to write the logfile to, no logfile is written when this is empty
        @param maxkbytes: the maximum logfile size in kilobytes
        @param count: the maximum number of logfiles to keep for rotation
        @param console: specifies whether or not to log to the console, this defaults to "True"
        '''

        # Start Twisted python log observer
        observer = twisted_log.PythonLoggingObserver()
        observer.start()

        # Regular Python logging module
        self.logger = logging.getLogger()
        formatter = logging.Formatter('%(asctime)s %(levelname)s: %(message)s')

        if logpath:
            log_handler = logging.handlers.RotatingFileHandler(
                filename=os.path.join(logpath, "%s.log" % name),
                maxBytes=maxkbytes * 1024, backupCount=count)
            log_handler.setFormatter(formatter)
            self.logger.addHandler(log_handler)

        if console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

    def set_level(self, level):
        '''
        This function allows you to set the level of logging.
        @param level: the level of logging, valid arguments are debug, info, warning, error, critical or none.
        '''
        if level in LEVELS:
            self.logger.setLevel(LEVELS[level])

    def error(self, message):
        '''
        This function allows you to log an error message.
        @param message: the message to log.
        '''
        twisted_log.msg(message, logLevel=logging.ERROR)

    def warning(self, message):
        '''
        This function allows you to log a warning message.
        @param message: the message to log.
        '''
        twisted_log.msg(message, logLevel=logging.WARNING)

    def info(self, message):
        '''
        This function allows you to log an info message.
        @param message: the message to log.
        '''
        twisted_log.msg(message, logLevel=logging.INFO)

    def debug(self, message):
        '''
        This function allows you to log a debug message.
        @param message: the message to log.
        '''
        twisted_log.msg(message, logLevel=logging.DEBUG)

    def critical(self, message):
        '''
        This function allows you to log a critical message.
        @param message: the message to log.
        '''
        twisted_log.msg(message, logLevel=logging.CRITICAL)
