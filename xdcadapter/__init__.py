"""XDC Network adapter.

Exposes XDC Network JSON-RPC and explorer surfaces as plain Python callables,
with a masternode and staking reward model on top.

See :py:class:`xdcadapter.masternode.MasternodeClient` for the main entry point.
"""
