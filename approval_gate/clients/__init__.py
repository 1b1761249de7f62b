"""Outbound HTTP clients: Shopify Admin REST and the Midocean order gateway.

Single attempt, synchronous, no retry. Failures are detected from the
response status and raised as UpstreamFailure / OrderNotFound.
"""
