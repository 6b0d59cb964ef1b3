"""
In-Memory Transport
===================
Synchronous request/response boundary between client and server.

Every message is serialized to JSON and parsed back on the other side,
exactly as it would be over a socket. Delivery is all-or-nothing: a
round either returns the full response batch or raises, and retrying
means repeating the whole round.
"""

from .messages import QueryMessage, ResponseMessage


class InMemoryTransport:
    """
    Delivers queries to a server object living in the same process.

    Args:
        server: Anything with ``handle_query(QueryMessage) -> ResponseMessage``
    """

    def __init__(self, server):
        self.server = server
        self.bytes_sent = 0
        self.bytes_received = 0

    def exchange(self, query: QueryMessage) -> ResponseMessage:
        request = query.to_json()
        self.bytes_sent += len(request)

        response = self.server.handle_query(QueryMessage.from_json(request))

        reply = response.to_json()
        self.bytes_received += len(reply)
        return ResponseMessage.from_json(reply)
