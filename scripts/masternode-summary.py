"""Print XDC masternodes and the current epoch.

Example:

.. code-block:: shell

    XDC_NETWORK=apothem python scripts/masternode-summary.py

Reads network, RPC URL and explorer settings from `XDC_` environment variables,
falling back to `~/.xdcadapter/settings.json`.
"""

import asyncio
import logging
import os
import sys

import pandas as pd

from xdcadapter.environment.config import Configuration, discover_configuration
from xdcadapter.masternode import MasternodeClient, masternodes_to_dataframe
from xdcadapter.transport.explorer import XdcExplorerApi
from xdcadapter.transport.provider import XdcProvider
from xdcadapter.units import format_xdc_balance


async def run(config: Configuration, limit: int):
    logger = logging.getLogger(__name__)

    provider = XdcProvider.from_configuration(config)
    explorer = XdcExplorerApi(
        provider.get_network_config(),
        api_key=config.explorer_api_key,
        base_url=config.explorer_api_url,
    )
    client = MasternodeClient.create(provider, explorer)

    try:
        epoch = await client.get_epoch_info()
        logger.info(
            "Epoch %d, blocks %d - %d, current block %d, %d blocks remaining, rewards so far %s (%s)",
            epoch.number,
            epoch.start_block,
            epoch.end_block,
            epoch.current_block,
            epoch.blocks_remaining,
            format_xdc_balance(epoch.rewards),
            epoch.rewards_source,
        )

        masternodes = await client.get_masternodes_list(limit)
        df = masternodes_to_dataframe(masternodes)

        with pd.option_context("display.max_rows", None, "display.width", 200):
            print(df.to_string(index=False))
    finally:
        explorer.close()


def main():
    logging.basicConfig(handlers=[logging.StreamHandler(sys.stdout)], level=logging.INFO)

    if os.environ.get("XDC_NETWORK") or os.environ.get("XDC_RPC_URL"):
        config = Configuration.from_environment()
    else:
        config = discover_configuration() or Configuration()

    limit = int(os.environ.get("LIMIT", "25"))
    asyncio.run(run(config, limit))


if __name__ == "__main__":
    main()
