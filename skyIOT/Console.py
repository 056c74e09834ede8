# -*- coding: utf-8 -*-
import io
import logging

from skyIOT.exceptions import LoggingSinkWriteError

LOG_PROCEDURE = 'iot:log'


class BackendStream(io.TextIOBase):
    ''' A text stream that sends everything written to it to the backend's log procedure.

    Every call to write is sent immediately as a single remote call.  There is no buffering so a slow backend blocks the writer until the call returns.

    Args:
        backend (:obj:`skyIOT.Backend.Backend`): The backend that receives the log text
        callback (callable, optional): Called after each write with None on success or a JSON description of the error on failure

    '''
    _logger = logging.getLogger(__name__)

    def __init__(self, backend, callback=None):
        super(BackendStream, self).__init__()
        self._backend = backend
        self._callback = callback

    def writable(self):
        return True

    def write(self, text):
        try:
            self._backend.call(LOG_PROCEDURE, text)
        except Exception as e:
            error = LoggingSinkWriteError(e).serialize()
            if self._callback:
                self._callback(error)
            else:
                # Not through the console that owns this stream
                self._logger.warning('Unable to send log output to backend.  Error: {0}'.format(error))
        else:
            if self._callback:
                self._callback(None)
        return len(text)


def createConsole(backend, name, callback=None):
    ''' Return a logger whose output is collected by the backend

    Args:
        backend (:obj:`skyIOT.Backend.Backend`): Backend that receives the log output
        name (str): Suffix of the logger name (the logger is named `skyIOT.console.<name>`)
        callback (callable, optional): Write callback handed to :obj:`BackendStream`

    '''
    # Not registered with the logging manager so the console and its backend go away with the Device
    console = logging.Logger('skyIOT.console.{0}'.format(name), logging.DEBUG)
    console.propagate = False

    handler = logging.StreamHandler(BackendStream(backend, callback))
    handler.setFormatter(logging.Formatter('%(levelname)s %(message)s'))
    console.addHandler(handler)
    return console
