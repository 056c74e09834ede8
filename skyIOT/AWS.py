# -*- coding: utf-8 -*-
import logging
import json

import boto3
from botocore.exceptions import ClientError
from AWSIoTPythonSDK.MQTTLib import AWSIoTMQTTClient

from skyIOT.exceptions import BackendOperationError


class MQTTPubsub(object):
    ''' Publish/subscribe transport over the AWS IOT-Core MQTT broker.  Messages are JSON documents

    Args:
        client (:obj:`AWSIoTMQTTClient`): A connected MQTT client.  Use :meth:`connect` to create one
        qos (int, optional): MQTT quality of service used for subscriptions and publishing.  Default is 1
    '''
    _logger = logging.getLogger(__name__)

    def __init__(self, client, qos=1):
        self._client = client
        self._qos = qos

    @classmethod
    def connect(cls, clientId, endpoint, rootCAPath, privateKeyPath, certificatePath, port=8883):
        ''' Establish connection to the AWS IOT service

        Args:
            clientId (str): MQTT client id.  Must be unique among the clients connected to the endpoint
            endpoint (str): URL of the IOT-Core endpoint assigned.  This is provided by the AWS IOT-Core service
            rootCAPath (str): Path to the file which holds a valid AWS root certificate
            privateKeyPath (str): Path to the file which holds the private key for your IOT device
            certificatePath (str): Path to the file which holds the certificate for your IOT device
            port (int, optional): Broker port.  Default is 8883
        '''
        client = AWSIoTMQTTClient(clientId)
        client.configureEndpoint(endpoint, port)
        client.configureCredentials(rootCAPath, privateKeyPath, certificatePath)

        client.configureAutoReconnectBackoffTime(1, 32, 20)
        client.configureConnectDisconnectTimeout(10)
        client.configureMQTTOperationTimeout(5)

        client.connect()
        cls._logger.info('Connected to {0} as {1}'.format(endpoint, clientId))
        return cls(client)

    def on(self, channel, handler):
        ''' Subscribe handler to channel.  handler receives the decoded message '''

        def callback(client, userdata, message):
            try:
                payload = json.loads(message.payload)
            except ValueError as e:
                self._logger.error('Dropping undecodable message on {0}.  Error: {1}'.format(message.topic, e))
                return
            try:
                handler(payload)
            except Exception:
                self._logger.exception('Handler for {0} failed'.format(message.topic))

        self._client.subscribe(channel, self._qos, callback)

    def publish(self, channel, message):
        self._client.publish(channel, json.dumps(message), self._qos)

    def disconnect(self):
        self._client.disconnect()


class LambdaRPC(object):
    ''' Remote procedure transport that runs each procedure as an AWS Lambda function.

    Procedure names may contain ':' (e.g. 'iot:report-status') which Lambda does not allow in function names, so it is replaced by '-'.

    Args:
        client (:obj:`botocore.client.Lambda`, optional): A boto3 Lambda client.  Created from region when omitted
        region (str, optional): The AWS region the functions are deployed in (e.g. 'us-east-1')
        functionPrefix (str, optional): Prepended to every function name
    '''
    _logger = logging.getLogger(__name__)

    def __init__(self, client=None, region=None, functionPrefix=''):
        self._client = client if client is not None else boto3.client('lambda', region_name=region)
        self._functionPrefix = functionPrefix

    def functionName(self, name):
        return self._functionPrefix + name.replace(':', '-')

    def call(self, name, args=None):
        functionName = self.functionName(name)
        try:
            response = self._client.invoke(
                FunctionName=functionName,
                InvocationType='RequestResponse',
                Payload=json.dumps({ 'args': args }).encode('utf-8'),
            )
        except ClientError as e:
            raise BackendOperationError('{0} could not be invoked.  Error: {1}'.format(functionName, e)) from e

        body = response['Payload'].read()
        if response.get('FunctionError'):
            raise BackendOperationError('{0} failed with {1}: {2}'.format(functionName, response['FunctionError'], body.decode('utf-8', 'replace')))
        if not body:
            return None
        return json.loads(body)
