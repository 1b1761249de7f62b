"""Order approval gate: Shopify -> Midocean with a human in the loop.

Public entry point is approval_gate.serve.create_app(settings).
"""
