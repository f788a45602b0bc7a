import logging
import logging.config
import os

LOG_CONFIG = os.getenv(
    "LOG_CONFIG",
    os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "logging.conf"),
)

# Ensure logs directory exists
os.makedirs("logs", exist_ok=True)

if os.path.exists(LOG_CONFIG):
    logging.config.fileConfig(LOG_CONFIG, disable_existing_loggers=False)
else:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


logger = logging.getLogger("storefront")
