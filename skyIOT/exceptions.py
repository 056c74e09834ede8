# -*- coding: utf-8 -*-
import json


class IOTError(Exception):
    ''' Base class for every error raised or reported by skyIOT '''


class AuthenticationRequiredError(IOTError):
    ''' Raised when a device is initialized before a user has logged into the backend '''


class BackendOperationError(IOTError):
    ''' Raised by a backend when a record save, remote procedure call or role grant fails '''


class MalformedCommandMessage(IOTError):
    ''' A message on the device channel that does not carry an action '''

    def __init__(self, message):
        super(MalformedCommandMessage, self).__init__('Command message has no action: {0!r}'.format(message))
        self.message = message


class UnsupportedCommand(IOTError):
    ''' A well formed command that the platform has no action for '''

    def __init__(self, command):
        super(UnsupportedCommand, self).__init__('Unsupported command {0}'.format(command))
        self.command = command


class LoggingSinkWriteError(IOTError):
    ''' The backend refused a diagnostic log write.  Never raised, only reported through the stream callback '''

    def __init__(self, cause):
        super(LoggingSinkWriteError, self).__init__(str(cause))
        self.cause = cause

    def serialize(self):
        ''' Return a JSON description of the failure suitable for handing to a write callback '''
        return json.dumps({ 'name': self.cause.__class__.__name__, 'message': str(self.cause) })
