"""Shopify orders/create webhook intake.

Each webhook is signature-verified over the raw body, then handed to the
order coordinator which marks the order pending review.
"""
