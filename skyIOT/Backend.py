# -*- coding: utf-8 -*-
import logging
import uuid

ACL_LEVELS = ('read', 'write')


class User(object):
    ''' The authenticated account of the backend session

    Args:
        id (str): The backend identifier of the user.  skyIOT uses it as the device id
        roles (`list` of str, optional): The names of the roles granted to the user
    '''

    def __init__(self, id, roles=None):
        self.id = id
        self.roles = set(roles or [])

    def hasRole(self, role):
        return role in self.roles

    def __repr__(self):
        return 'User({0!r}, roles={1!r})'.format(self.id, sorted(self.roles))


class ACL(object):
    ''' Access control policy attached to a record.  Each entry grants a permission level to a role

    Args:
        entries (`list` of dict): Entries of the form `{'role': 'iot-manager', 'level': 'read'}`.  Level must be 'read' or 'write'
    '''

    def __init__(self, entries=None):
        self.entries = []
        for entry in entries or []:
            self.allow(entry['role'], entry['level'])

    def allow(self, role, level):
        if level not in ACL_LEVELS:
            raise ValueError('{0} is not a valid access level for role {1}'.format(level, role))
        self.entries.append({ 'role': role, 'level': level })
        return self

    def levelFor(self, role):
        ''' Return the highest level granted to role or None if the role has no access '''
        levels = [ e['level'] for e in self.entries if e['role'] == role ]
        if 'write' in levels:
            return 'write'
        return 'read' if levels else None

    def __eq__(self, other):
        return isinstance(other, ACL) and self.entries == other.entries

    def __repr__(self):
        return 'ACL({0!r})'.format(self.entries)


class Record(object):
    ''' A structured document stored by the backend in the collection named by recordType

    The record id is taken from the `_id` field of data when present.  Otherwise a new UUID is generated so that the id is known before the record is saved.

    Args:
        recordType (str): Name of the collection the record belongs to (e.g. 'iot_device')
        data (dict): The fields of the record
        acl (:obj:`ACL`, optional): Access policy for the record
    '''

    def __init__(self, recordType, data=None, acl=None):
        data = dict(data or {})
        self.recordType = recordType
        self.id = str(data.pop('_id', None) or uuid.uuid4())
        self.data = data
        self.acl = acl if acl is not None else ACL()

    @property
    def key(self):
        return '{0}/{1}'.format(self.recordType, self.id)

    def setACL(self, acl):
        self.acl = acl

    def __getitem__(self, field):
        return self.data[field]

    def __repr__(self):
        return 'Record({0!r}, {1!r})'.format(self.key, self.data)


class Backend(object):
    ''' The backend client a Device talks to.

    A host SDK binds skyIOT to its service by subclassing Backend and implementing the session and storage methods.  The publish/subscribe and remote procedure methods can either be implemented directly or delegated to transport objects such as :obj:`skyIOT.AWS.MQTTPubsub` and :obj:`skyIOT.AWS.LambdaRPC`.

    Every method is blocking.  A failed operation must raise :obj:`skyIOT.exceptions.BackendOperationError`.

    Args:
        pubsub (object, optional): Object providing `on(channel, handler)`
        rpc (object, optional): Object providing `call(name, args)`
    '''
    _logger = logging.getLogger(__name__)

    def __init__(self, pubsub=None, rpc=None):
        self._pubsub = pubsub
        self._rpc = rpc

    @property
    def currentUser(self):
        ''' The :obj:`User` of the authenticated session or None when nobody is logged in '''
        raise NotImplementedError('{0} does not provide currentUser'.format(self.__class__.__name__))

    def refreshCurrentUser(self):
        ''' Reload the cached current user from the backend so that newly granted roles become visible '''
        raise NotImplementedError('{0} does not provide refreshCurrentUser'.format(self.__class__.__name__))

    def save(self, records):
        ''' Persist a list of :obj:`Record` objects.  Should be atomic when the backend supports multi-record saves '''
        raise NotImplementedError('{0} does not provide save'.format(self.__class__.__name__))

    def call(self, name, args=None):
        ''' Invoke the remote procedure name with args and return its result '''
        if self._rpc is None:
            raise NotImplementedError('{0} has no remote procedure transport'.format(self.__class__.__name__))
        self._logger.debug('Calling {0}'.format(name))
        return self._rpc.call(name, args)

    def on(self, channel, handler):
        ''' Register handler to receive every decoded message published on channel '''
        if self._pubsub is None:
            raise NotImplementedError('{0} has no publish/subscribe transport'.format(self.__class__.__name__))
        self._logger.debug('Subscribing to {0}'.format(channel))
        self._pubsub.on(channel, handler)
