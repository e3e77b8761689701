"""
Application layer.

One use case per ledger operation (periods, receipts, consumptions,
balance reports). Each opens a store transaction or snapshot, runs the
core services inside it and maps the result to a response DTO. API
handlers only talk to use cases.
"""
