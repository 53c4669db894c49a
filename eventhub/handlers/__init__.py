"""AWS Lambda event handlers of the application.

Each top level package in `eventhub.handlers` corresponds to an API resource,
each module in a package is one Lambda function. API Gateway proxy handlers
dispatch on the HTTP method, `eventhub.handlers.notifications.fanout` consumes
the table stream.

Handlers may import names from peer modules or common modules, but may not
import from other handler packages. Eg.: `eventhub.handlers.events.register`
may import from `eventhub.common.models`, but it may not import from
`eventhub.handlers.connections`.

"""
