#!/usr/bin/env python3
"""Create the DynamoDB table of the app.

Creates the table with the inverse index, enables the stream that feeds the
notification fan-out and the TTL of the outbox items.

Run from repo root.

"""
import argparse
import logging

import boto3


def create_table(table_name, inverse_index, region_name=None):
    logging.info(f'Creating table {table_name}...')
    client = boto3.client('dynamodb', region_name=region_name)
    client.create_table(
        TableName=table_name,
        AttributeDefinitions=[
            {'AttributeName': 'PK', 'AttributeType': 'S'},
            {'AttributeName': 'SK', 'AttributeType': 'S'},
        ],
        KeySchema=[
            {'AttributeName': 'PK', 'KeyType': 'HASH'},
            {'AttributeName': 'SK', 'KeyType': 'RANGE'},
        ],
        GlobalSecondaryIndexes=[
            {
                'IndexName': inverse_index,
                'KeySchema': [
                    {'AttributeName': 'SK', 'KeyType': 'HASH'},
                    {'AttributeName': 'PK', 'KeyType': 'RANGE'},
                ],
                'Projection': {'ProjectionType': 'ALL'},
            }
        ],
        BillingMode='PAY_PER_REQUEST',
        # The fan-out only needs the inserted outbox items.
        StreamSpecification={
            'StreamEnabled': True,
            'StreamViewType': 'NEW_IMAGE'
        }
    )
    waiter = client.get_waiter('table_exists')
    waiter.wait(
        TableName=table_name,
        WaiterConfig={
            'Delay': 5  # seconds
        }
    )
    client.update_time_to_live(
        TableName=table_name,
        TimeToLiveSpecification={
            'Enabled': True,
            'AttributeName': 'ExpiresAt'
        }
    )
    logging.info(f'Successfully created table {table_name}')


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('-n', '--table_name', type=str, required=True,
                        help='Table name')
    parser.add_argument('-i', '--inverse_index', type=str,
                        default='InverseIndex',
                        help='Name of the inverse global secondary index')
    parser.add_argument('-r', '--region', type=str, default=None,
                        help='AWS region')
    args = parser.parse_args()

    create_table(args.table_name, args.inverse_index, args.region)
