"""Real-time infrastructure — Redis pub/sub + WebSocket.

Learn: New-article events flow through two hops:
1. API → Redis PUBLISH on the news channel (ChangeNotifier)
2. Redis SUBSCRIBE → every connected WebSocket (RealtimeGateway)

Delivery is at-most-once: a client that isn't connected when the
message goes out never sees it.
"""
