"""Structured logging for the proxy and the command line tools.

The server writes one JSON object per line. The CLI and the test suite use the
console renderer and keep library loggers quiet below WARNING.
"""

import logging
import sys
from typing import IO, Optional, cast

import structlog
from structlog.stdlib import BoundLogger

APP_LOGGER = "studyaid"


def _level(name: str) -> int:
	level = logging.getLevelName(name.upper())
	return level if isinstance(level, int) else logging.INFO


def configure_logging(level: str = "info", *, console: bool = False, stream: Optional[IO[str]] = None) -> None:
	"""Route structlog and stdlib records for ``studyaid.*`` through one handler.

	Args:
		level: Level name for the studyaid loggers; unknown names mean info
		console: Render for a terminal instead of JSON
		stream: Destination, stderr by default
	"""
	app_level = _level(level)
	pre_chain = [
		structlog.stdlib.add_logger_name,
		structlog.stdlib.add_log_level,
		structlog.processors.TimeStamper(fmt="iso", utc=True),
	]
	if console:
		# ConsoleRenderer formats exceptions itself
		render = [structlog.dev.ConsoleRenderer(colors=False)]
	else:
		render = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

	structlog.configure(
		processors=[
			structlog.stdlib.filter_by_level,
			*pre_chain,
			structlog.processors.StackInfoRenderer(),
			structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
		],
		context_class=dict,
		logger_factory=structlog.stdlib.LoggerFactory(),
		wrapper_class=structlog.stdlib.BoundLogger,
		cache_logger_on_first_use=False,
	)

	handler = logging.StreamHandler(stream or sys.stderr)
	handler.setFormatter(structlog.stdlib.ProcessorFormatter(
		processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render],
		foreign_pre_chain=pre_chain,
	))

	app_logger = logging.getLogger(APP_LOGGER)
	app_logger.handlers = [handler]
	app_logger.setLevel(app_level)
	app_logger.propagate = False

	# httpx and uvicorn only surface problems
	root = logging.getLogger()
	root.handlers = [handler]
	root.setLevel(max(app_level, logging.WARNING))


def get_logger(name: Optional[str] = None) -> BoundLogger:
	return cast(BoundLogger, structlog.get_logger(name or APP_LOGGER))
