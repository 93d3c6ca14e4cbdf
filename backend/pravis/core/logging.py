import glob
import logging
import os
from datetime import datetime
from typing import Optional, Union

SESSION_LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


class SessionLogger:
    """
    Per-conversation transcript of what the assistant saw and did.

    Writes to {YYYYmmdd_HHMM}_{conversation_id}.log under log_dir. Later
    requests of the same conversation append to the file created first.
    Anonymous sessions skip the lookup and use a timestamped name.
    """
    def __init__(
        self,
        log_dir: str,
        conversation_id: Optional[str],
        level: Union[int, str] = logging.INFO,
        fmt: str = SESSION_LOG_FORMAT,
    ):
        self.conversation_id = conversation_id or "unknown"
        os.makedirs(log_dir, exist_ok=True)
        self.filepath = self._log_path(log_dir)
        self.filename = os.path.basename(self.filepath)

        self._handler = logging.FileHandler(self.filepath, encoding="utf-8")
        self._handler.setFormatter(logging.Formatter(fmt))

        self.logger = logging.getLogger(f"pravis.session.{self.conversation_id}.{id(self)}")
        self.logger.setLevel(level)
        self.logger.propagate = False
        self.logger.addHandler(self._handler)

    def _log_path(self, log_dir: str) -> str:
        if self.conversation_id != "unknown":
            pattern = os.path.join(glob.escape(log_dir), f"*_{glob.escape(self.conversation_id)}.log")
            existing = sorted(glob.glob(pattern))
            if existing:
                return existing[0]
        stamp = datetime.now().strftime("%Y%m%d_%H%M")
        return os.path.join(log_dir, f"{stamp}_{self.conversation_id}.log")

    def info(self, msg: str):
        self.logger.info(msg)

    def warning(self, msg: str):
        self.logger.warning(msg)

    def error(self, msg: str):
        self.logger.error(msg)

    def close(self):
        """Detach and close the file handler."""
        self.logger.removeHandler(self._handler)
        self._handler.close()


class NullSessionLogger:
    """Drop-in replacement used when session logs are disabled."""
    def info(self, msg: str):
        pass

    def error(self, msg: str):
        pass

    def warning(self, msg: str):
        pass

    def close(self):
        pass


def open_session_logger(settings, conversation_id: Optional[str]):
    if not getattr(settings, "enable_session_logs", False):
        return NullSessionLogger()
    return SessionLogger(
        settings.resolve_path(settings.log_dir),
        conversation_id,
        level=settings.session_log_level.upper(),
        fmt=settings.session_log_format,
    )


def setup_logging():
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    # Silence noisy libraries
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)
    logging.getLogger("litellm").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
