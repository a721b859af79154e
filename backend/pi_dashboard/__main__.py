"""Run the API server: ``python -m pi_dashboard``."""

import logging
import sys

from pi_dashboard import create_app
from pi_dashboard.config import ConfigError, load_config

logger = logging.getLogger("pi_dashboard")


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        config = load_config()
    except ConfigError as e:
        logger.error(str(e))
        return 1

    logging.getLogger().setLevel(config["LOG_LEVEL"])

    app = create_app(config)
    logger.info(f"API listening on http://localhost:{config['PORT']}")
    app.run(host="0.0.0.0", port=config["PORT"], threaded=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
