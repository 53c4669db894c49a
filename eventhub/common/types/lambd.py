# lambda is a reserved name in Python, hence the module name lambd
from typing import Any, Dict, List, Literal, Optional, Protocol, TypedDict


class LambdaContext(Protocol):
    """Lambda context object type.

    .. _AWS docs:
        https://docs.aws.amazon.com/lambda/latest/dg/python-context-object.html  # noqa 501

    """

    aws_request_id: str
    function_name: str


class _RequestContext(TypedDict, total=False):
    domainName: str
    requestId: str


class _ProxyEventTotal(TypedDict):
    httpMethod: str
    path: str
    headers: Dict[str, str]
    pathParameters: Optional[Dict[str, str]]
    requestContext: _RequestContext
    queryStringParameters: Optional[Dict[str, str]]


class ProxyEvent(_ProxyEventTotal, total=False):
    """AWS Lambda API Gateway Proxy event.

    Only includes members used by the app.

    .. _AWS docs:
         https://docs.aws.amazon.com/apigateway/latest/developerguide/set-up-lambda-proxy-integrations.html

    """

    # JSON string
    body: Optional[str]
    isBase64Encoded: bool
    multiValueHeaders: Dict[str, List[str]]


class ProxyResponse(TypedDict, total=False):
    """AWS Lambda API Gateway Proxy integration response.

    .. _AWS docs:
        https://docs.aws.amazon.com/apigateway/latest/developerguide/set-up-lambda-proxy-integrations.html

    """

    isBase64Encoded: bool
    statusCode: int
    headers: Dict[str, str]
    multiValueHeaders: Dict[str, List[str]]
    body: str


# DynamoDB JSON, eg. `{'PK': {'S': 'OUTBOX#123'}}`
DynamoImage = Dict[str, Dict[str, Any]]


class _StreamRecordData(TypedDict, total=False):
    ApproximateCreationDateTime: float
    Keys: DynamoImage
    NewImage: DynamoImage
    OldImage: DynamoImage
    SequenceNumber: str
    SizeBytes: int
    StreamViewType: str


class StreamRecord(TypedDict, total=False):
    """A record of a DynamoDB stream event.

    .. _AWS docs:
        https://docs.aws.amazon.com/lambda/latest/dg/with-ddb.html
    """

    eventID: str
    eventName: Literal['INSERT', 'MODIFY', 'REMOVE']
    eventSource: str
    eventSourceARN: str
    dynamodb: _StreamRecordData


class StreamEvent(TypedDict):
    """AWS Lambda DynamoDB stream event."""

    Records: List[StreamRecord]


class _BatchItemFailure(TypedDict):
    itemIdentifier: str


class BatchResponse(TypedDict):
    """Partial batch response for stream event sources.

    The stream retries starting from the first failed record.

    .. _AWS docs:
        https://docs.aws.amazon.com/lambda/latest/dg/with-ddb.html#services-ddb-batchfailurereporting
    """

    batchItemFailures: List[_BatchItemFailure]
