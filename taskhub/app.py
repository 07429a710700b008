import logging
from contextlib import asynccontextmanager
from logging.config import dictConfig

import yaml
from fastapi import FastAPI

from taskhub.core.config import get_settings
from taskhub.core.version import __version__
from taskhub.core.features.policies.dependencies import access_error_handler
from taskhub.core.features.policies.exceptions import AccessError
from taskhub.core.features.policies.router import router as policies_router

logger = logging.getLogger(__name__)
config = get_settings()
prefix = config.api_prefix


def configure_logging(log_config_path) -> bool:
	"""Apply a YAML dictConfig when the file exists."""
	if log_config_path is None:
		return False
	if not (log_config_path.exists() and log_config_path.is_file()):
		return False
	with open(log_config_path, "r") as stream:
		log_config = yaml.load(stream, Loader=yaml.FullLoader)
	dictConfig(log_config)
	return True


@asynccontextmanager
async def lifespan(app: FastAPI):
	"""Application lifespan handler for startup/shutdown events."""
	logger.info("Starting taskhub API server...")
	if getattr(app.state, "stores", None) is None:
		logger.warning("No authorization stores attached to app.state.stores")

	yield

	logger.info("Shutting down taskhub API server...")


configure_logging(config.log_config)

app = FastAPI(
	title="taskhub REST API",
	version=__version__,
	lifespan=lifespan,
)

app.add_exception_handler(AccessError, access_error_handler)
app.include_router(policies_router, prefix=prefix)
