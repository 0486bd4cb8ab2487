"""Test package for menutree unit and integration tests."""

import logging

logging.getLogger("asyncio").setLevel(logging.ERROR)
