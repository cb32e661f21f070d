"""Shared fixtures for DynamoDB-backed tests."""
import boto3
import pytest
from moto import mock_aws

from storage.dynamodb_manager import DynamoDBManager

EVENTS_TABLE = 'test-events'
BOOKINGS_TABLE = 'test-bookings'
SLUGS_TABLE = 'test-event-slugs'


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Use fake credentials so no test can reach real AWS."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture
def dynamodb(aws_credentials):
    """Create mock events, bookings and slug tables."""
    with mock_aws():
        resource = boto3.resource('dynamodb', region_name='us-east-1')

        resource.create_table(
            TableName=EVENTS_TABLE,
            KeySchema=[{'AttributeName': 'event_id', 'KeyType': 'HASH'}],
            AttributeDefinitions=[
                {'AttributeName': 'event_id', 'AttributeType': 'S'}
            ],
            BillingMode='PAY_PER_REQUEST'
        )

        resource.create_table(
            TableName=SLUGS_TABLE,
            KeySchema=[{'AttributeName': 'slug', 'KeyType': 'HASH'}],
            AttributeDefinitions=[
                {'AttributeName': 'slug', 'AttributeType': 'S'}
            ],
            BillingMode='PAY_PER_REQUEST'
        )

        resource.create_table(
            TableName=BOOKINGS_TABLE,
            KeySchema=[{'AttributeName': 'booking_id', 'KeyType': 'HASH'}],
            AttributeDefinitions=[
                {'AttributeName': 'booking_id', 'AttributeType': 'S'},
                {'AttributeName': 'event_id', 'AttributeType': 'S'}
            ],
            GlobalSecondaryIndexes=[
                {
                    'IndexName': 'event-index',
                    'KeySchema': [
                        {'AttributeName': 'event_id', 'KeyType': 'HASH'}
                    ],
                    'Projection': {'ProjectionType': 'ALL'}
                }
            ],
            BillingMode='PAY_PER_REQUEST'
        )

        yield resource


@pytest.fixture
def dynamodb_manager(dynamodb):
    """Create DynamoDBManager instance with mock tables."""
    return DynamoDBManager(
        events_table=EVENTS_TABLE,
        bookings_table=BOOKINGS_TABLE,
        slugs_table=SLUGS_TABLE,
        dynamodb=dynamodb
    )
