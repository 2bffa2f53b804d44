"""
Verify Environment Script
Checks that the variables the API and the web client share are configured.
Exits with status 1 when any are missing.
"""

import sys
import logging
from typing import Optional

from hootai.config.settings import Settings

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def main(settings: Optional[Settings] = None) -> int:
    settings = settings or Settings()
    missing = settings.missing_required_env()
    if not missing:
        logger.info("All required environment variables are set.")
        if not settings.azure_chat_completions_url:
            logger.warning("Azure OpenAI variables are incomplete; analysis requests will fail.")
        return 0

    logger.warning("Some required environment variables are missing.")
    logger.warning("Please create or update your .env file with the following variables:")
    for name in missing:
        logger.warning(f"  {name}=")
    return 1


if __name__ == "__main__":
    sys.exit(main())
