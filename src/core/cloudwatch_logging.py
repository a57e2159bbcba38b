"""
Optional CloudWatch Logs shipping for the generation path.

The handler forwards INFO and above from the orchestrator, the gateway
client and the generate-image route. Everything else only reaches
CloudWatch at ERROR or above. Console logging is unaffected.

Turn it on with CLOUDWATCH_ENABLED=true after installing the "cloudwatch"
extra. AWS credentials come from the usual boto3 chain.

  CLOUDWATCH_LOG_GROUP   group to write to (/app/ai-style-image-generator)
  CLOUDWATCH_LOG_STREAM  stream name; watchtower picks one when unset
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

GENERATION_LOGGERS = (
    "src.services.generation_service",
    "src.core.image_generator",
    "src.api.routes.generate",
)

# Handlers attached by setup_cloudwatch_logging, detached again on flush
_attached: list[logging.Handler] = []


@dataclass
class CloudWatchConfig:
    enabled: bool = field(
        default_factory=lambda: os.getenv("CLOUDWATCH_ENABLED", "").lower() == "true"
    )
    log_group: str = field(
        default_factory=lambda: os.getenv("CLOUDWATCH_LOG_GROUP", "/app/ai-style-image-generator")
    )
    log_stream: Optional[str] = field(default_factory=lambda: os.getenv("CLOUDWATCH_LOG_STREAM"))
    send_interval: int = 10
    max_batch_count: int = 100


class GenerationLogFilter(logging.Filter):
    def __init__(self, loggers: tuple[str, ...] = GENERATION_LOGGERS):
        super().__init__()
        self.loggers = loggers

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= logging.ERROR:
            return True
        return record.levelno >= logging.INFO and record.name.startswith(self.loggers)


def _build_handler(config: CloudWatchConfig) -> Optional[logging.Handler]:
    try:
        import watchtower
    except ImportError:
        logger.warning("CLOUDWATCH_ENABLED is set but watchtower is missing; install the cloudwatch extra")
        return None

    try:
        return watchtower.CloudWatchLogHandler(
            log_group_name=config.log_group,
            log_stream_name=config.log_stream,
            send_interval=config.send_interval,
            max_batch_count=config.max_batch_count,
        )
    except Exception as e:
        logger.warning("CloudWatch handler not created: %s", e)
        return None


def setup_cloudwatch_logging(config: Optional[CloudWatchConfig] = None) -> bool:
    """Attach the CloudWatch handler to the root logger. Returns whether it is active."""
    config = config or CloudWatchConfig()
    if not config.enabled:
        return False

    handler = _build_handler(config)
    if handler is None:
        return False

    handler.setLevel(logging.INFO)
    handler.addFilter(GenerationLogFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(handler)
    _attached.append(handler)
    logger.info("Shipping generation logs to CloudWatch group %s", config.log_group)
    return True


def flush_cloudwatch_logging() -> None:
    root = logging.getLogger()
    while _attached:
        handler = _attached.pop()
        handler.flush()
        handler.close()
        root.removeHandler(handler)
