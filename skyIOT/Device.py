# -*- coding: utf-8 -*-
from threading import Lock, Thread
import hashlib
import logging
import re

from skyIOT.Backend import ACL, Record
from skyIOT.Console import createConsole
from skyIOT.exceptions import AuthenticationRequiredError, MalformedCommandMessage, UnsupportedCommand
from skyIOT.version import sdkVersion

DEVICE_RECORD = 'iot_device'
LOGIN_RECORD = 'iot_device_login'
ADD_ROLE_PROCEDURE = 'iot:add-device-role'
REPORT_STATUS_PROCEDURE = 'iot:report-status'
REQUEST_STATUS_EVENT = 'iot-request-status'
COMMAND_PATTERN = re.compile('^iot-(.+)$')
STATUS_ONLINE = 'online'


def pubsubChannel(deviceSecret, prefix=''):
    ''' Compute the name of the channel the backend uses to send commands to the device with deviceSecret

    The channel is the hex encoded SHA-256 digest of the secret, so the device and the backend derive the same name independently.
    '''
    if not deviceSecret:
        raise ValueError('A device secret is required')
    if isinstance(deviceSecret, str):
        deviceSecret = deviceSecret.encode('utf-8')
    return prefix + hashlib.sha256(deviceSecret).hexdigest()


class DeviceSession(object):
    ''' Identity of an initialized device.  Every field is None until the device has been initialized

    Attributes:
        id (str): Backend user id that identifies the device
        platform (:obj:`skyIOT.Platform.Platform`): The platform passed to :meth:`Device.initialize`
        loginID (str): Id of the login record saved by the last initialization
        pubsubChannel (str): Channel the device listens on for commands
    '''

    def __init__(self, id=None, platform=None, loginID=None, pubsubChannel=None):
        self.id = id
        self.platform = platform
        self.loginID = loginID
        self.pubsubChannel = pubsubChannel

    @property
    def initialized(self):
        return self.id is not None

    def __repr__(self):
        return 'DeviceSession(id={0!r}, loginID={1!r}, pubsubChannel={2!r})'.format(self.id, self.loginID, self.pubsubChannel)


class Device(object):
    ''' Registers the hardware as a device of the logged in user, listens for commands from the backend and reports the device status.

    Args:
        backend (:obj:`skyIOT.Backend.Backend`): The backend client.  A user must be logged in before :meth:`initialize` is called
        channelPrefix (str, optional): Prepended to the digest of the device secret to form the command channel.  Must match the prefix used by the backend.  Default is no prefix
        deviceRole (str, optional): Role granted to users that own a device.  Default is 'iot-device'
        managerRole (str, optional): Role allowed to read device and login records.  Default is 'iot-manager'
        reportOnInit (bool, optional): Report the device status as the last step of :meth:`initialize`.  Default is False

    '''
    _logger = logging.getLogger(__name__)

    def __init__(self, backend, channelPrefix='', deviceRole='iot-device', managerRole='iot-manager', reportOnInit=False):
        self._backend = backend
        self._channelPrefix = channelPrefix
        self._deviceRole = deviceRole
        self._managerRole = managerRole
        self._reportOnInit = reportOnInit
        self._device = DeviceSession()
        self._initlock = Lock()
        self._console = createConsole(backend, '{0:x}'.format(id(self)))

    @property
    def device(self):
        ''' The :obj:`DeviceSession` of this device '''
        return self._device

    @property
    def console(self):
        ''' A logger whose output is sent to the backend '''
        return self._console

    def initialize(self, platform):
        ''' Bind the device to platform and register it with the current user if it is not registered yet.

        Must be called after logging into the backend.  Make sure the current user is not already registered with another device.

        Args:
            platform (:obj:`skyIOT.Platform.Platform`): The platform the device runs on

        Raises:
            AuthenticationRequiredError: No user is logged into the backend
            BackendOperationError: The backend failed to save a record or to grant the device role

        '''
        with self._initlock:
            user = self._backend.currentUser
            if user is None:
                raise AuthenticationRequiredError('Login required before initializing the device')

            deviceID = user.id
            channel = pubsubChannel(platform.deviceSecret, self._channelPrefix)

            if not user.hasRole(self._deviceRole):
                self._register(deviceID, platform)

            loginRecord = Record(LOGIN_RECORD, {
                'deviceID': deviceID,
                'sdkVersion': sdkVersion,
                'appVersion': platform.appVersion,
            }, ACL([
                { 'role': self._deviceRole, 'level': 'write' },
                { 'role': self._managerRole, 'level': 'read' },
            ]))
            self._backend.save([loginRecord])
            self._logger.info('Device {0} logged in as {1}'.format(deviceID, loginRecord.id))

            self._backend.on(REQUEST_STATUS_EVENT, self._guard(self._onStatusRequest))
            self._backend.on(channel, self._guard(lambda message: self._onCommand(platform, message)))

            self._device = DeviceSession(deviceID, platform, loginRecord.id, channel)
            self._logger.info('Listening for commands on {0}'.format(channel))

        if self._reportOnInit:
            self.reportStatus()

    def _register(self, deviceID, platform):
        ''' Save the device record and grant the device role to the current user '''
        deviceRecord = Record(DEVICE_RECORD, {
            '_id': deviceID,
            'secret': platform.deviceSecret,
            'active': True,
        }, ACL([
            { 'role': self._deviceRole, 'level': 'write' },
            { 'role': self._managerRole, 'level': 'write' },
        ]))
        self._backend.save([deviceRecord])
        self._backend.call(ADD_ROLE_PROCEDURE, [])
        self._backend.refreshCurrentUser()
        self._logger.info('Registered new device {0}'.format(deviceRecord.key))

    def reportStatus(self, metadata=None):
        ''' Report the device status to the backend.  This is called automatically when requested by the backend

        Args:
            metadata (any serializable value, optional): Saved with the status record

        Returns:
            The result of the backend call
        '''
        device = self._device
        return self._backend.call(REPORT_STATUS_PROCEDURE, {
            'deviceID': device.id,
            'loginID': device.loginID,
            'status': STATUS_ONLINE,
            'metadata': metadata,
        })

    def _onStatusRequest(self, message):
        self._detach('reportStatus', self.reportStatus)

    def _onCommand(self, platform, message):
        action = message.get('action') if isinstance(message, dict) else None
        if not isinstance(action, str):
            raise MalformedCommandMessage(message)

        match = COMMAND_PATTERN.match(action)
        if not match:
            return

        command = match.group(1)
        func = platform.actionFor(command)
        if func is None:
            raise UnsupportedCommand(command)

        self._logger.info('Running {0} command'.format(command))
        self._detach(command, func)

    def _guard(self, handler):
        ''' Wrap a subscription handler so that no error reaches the publish/subscribe transport '''

        def guarded(message):
            try:
                handler(message)
            except UnsupportedCommand as e:
                self._logger.warning('{0}. Command ignored'.format(e))
            except MalformedCommandMessage as e:
                self._logger.error(str(e))
            except Exception:
                self._logger.exception('Subscription handler failed')

        return guarded

    def _detach(self, name, func, *args):
        ''' Run func on its own thread without waiting for it.  Failures are logged locally and to the backend console '''

        def run():
            try:
                func(*args)
            except Exception as e:
                self._logger.exception('{0} failed'.format(name))
                self._console.error('{0} failed.  Error: {1}'.format(name, e))

        thread = Thread(target=run, name='skyIOT-{0}'.format(name), daemon=True)
        thread.start()
        return thread
