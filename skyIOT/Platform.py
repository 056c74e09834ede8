# -*- coding: utf-8 -*-
import logging


class Platform(object):
    ''' Describes the hardware and application a Device runs on.

    The platform holds the secret that identifies the hardware, the version of the user application and the actions the device can perform when the backend sends it a command.  All actions are optional, only provide the ones that apply to your hardware.

    Args:
        deviceSecret (str): A string that is unique to the hardware, could be SoC model + serial number
        appVersion (str): Version string of the user application
        actions (dict, optional): Mapping of command name to a function taking no arguments (e.g. `{'restart': reboot}`)

    Actions can also be declared on a subclass using the :meth:`action` decorator.

    '''
    _logger = logging.getLogger(__name__)

    def __init__(self, deviceSecret=None, appVersion=None, actions=None):
        if not deviceSecret:
            raise ValueError('A device secret is required')
        self.deviceSecret = deviceSecret
        self.appVersion = appVersion
        self.actions = self._initializeActions()
        for command, func in (actions or {}).items():
            self.addAction(command, func)

    @classmethod
    def action(cls, command):
        ''' Decorates the method that carries out a command sent to the device.

        The backend commands a device by publishing `{'action': 'iot-<command>'}` on the device channel.  When it arrives, the method registered for `<command>` is called with no arguments other than self.  Its return value is ignored.

        Args:
          command (str): the name of the command the method handles

        **Example:**

            .. code-block:: python

                class RaspberryPi(Platform):

                    @Platform.action('restart')
                    def restart(self):
                        subprocess.call(['sudo', 'reboot'])

                    @Platform.action('shutdown')
                    def shutdown(self):
                        subprocess.call(['sudo', 'poweroff'])

        '''

        def decorateinterface(func):
            commands = getattr(func, '__platformAction__', [])
            commands.append(command)
            func.__platformAction__ = commands
            return func

        return decorateinterface

    def _initializeActions(self):
        actions = {}
        for supercls in reversed(self.__class__.__mro__):  # Subclass methods override inherited ones
            for name, method in supercls.__dict__.items():
                for command in getattr(method, '__platformAction__', []):
                    actions[command] = getattr(self, name)
        return actions

    def addAction(self, command, func):
        if not callable(func):
            raise TypeError('Action for {0} is not callable'.format(command))
        if command in self.actions:
            self._logger.warning('Replacing existing action for {0}'.format(command))
        self.actions[command] = func

    def actionFor(self, command):
        ''' Return the function registered for command or None if the platform does not support it '''
        return self.actions.get(command)

    def __repr__(self):
        return 'Platform(appVersion={0!r}, actions={1!r})'.format(self.appVersion, sorted(self.actions))
