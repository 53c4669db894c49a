"""Deliver notifications from the outbox items on the table stream.

The stream delivers records at least once, so a record may be processed again
after a partial failure. Delivery is idempotent, see
`eventhub.common.fanout.deliver`.

"""
from typing import List

import eventhub.common.db as db
from eventhub.common import fanout
from eventhub.common.config import config
from eventhub.common.logging import get_logger
from eventhub.common.models import Outbox
from eventhub.common.types.lambd import BatchResponse, LambdaContext, \
    StreamEvent, StreamRecord


_log = get_logger(__name__)

_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


def _process_record(database: db.Database, record: StreamRecord) -> None:
    if record.get('eventName') != 'INSERT':
        return
    image = record.get('dynamodb', {}).get('NewImage')
    if not image:
        return
    entry = Outbox.from_image(image)
    if entry is None:
        return
    fanout.deliver(database, entry)


def _handle_records(database: db.Database, records: List[StreamRecord]) \
        -> BatchResponse:
    failures = []
    for record in records:
        try:
            _process_record(database, record)
        except (db.DatabaseError, ValueError) as e:
            seq = record.get('dynamodb', {}).get('SequenceNumber', '')
            _log.error(f'Failed to process stream record {seq}:\n{e}')
            failures.append({'itemIdentifier': seq})
    return {'batchItemFailures': failures}


def handler(event: StreamEvent, context: LambdaContext) -> BatchResponse:
    """Fan out the outbox items inserted into the table."""
    return _handle_records(_database, event['Records'])
