"""**Device identity and status reporting for backend connected IOT devices.**

.. module:: skyIOT

skyIOT turns a device running an application logged into a backend-as-a-service account into a managed IOT device.  When the device is initialized, skyIOT registers it with the logged in user the first time it is seen, saves a login record for every start, and subscribes to a command channel derived from a secret that is unique to the hardware.  The backend can then ask the device to report its status or send it commands such as restart or shutdown which skyIOT hands to the actions provided by the device's Platform.

skyIOT does not talk to any particular service itself.  It relies on a Backend object supplied by the host SDK which provides the current user, record storage, remote procedure calls and publish/subscribe.  Transports for the AWS IOT-Core MQTT broker and AWS Lambda are included in skyIOT.AWS.

"""

from skyIOT.Device import Device, DeviceSession, pubsubChannel
from skyIOT.Platform import Platform
from skyIOT.Backend import ACL, Backend, Record, User
from skyIOT.exceptions import AuthenticationRequiredError, BackendOperationError
from skyIOT.version import sdkVersion
