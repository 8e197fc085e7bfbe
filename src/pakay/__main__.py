"""Run the Pakay gateway: python -m pakay"""

import logging

import uvicorn

from pakay.config import load_config

config = load_config()
logging.basicConfig(
    level=config.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
uvicorn.run("pakay.app:create_app", host=config.host, port=config.port, factory=True)
