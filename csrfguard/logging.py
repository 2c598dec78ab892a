import logging
import os
from logging.handlers import RotatingFileHandler

from . import config

FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

def setup(level: int = logging.INFO, log_dir: str = None):
    logging.basicConfig(level=level, format=FORMAT)
    log_dir = log_dir or config.LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    path = os.path.join(log_dir, "csrf_audit.log")
    lg = logging.getLogger("csrf.audit")
    lg.setLevel(level)
    # setup() may run more than once (reload, tests); keep a single file handler
    if not any(isinstance(h, RotatingFileHandler) for h in lg.handlers):
        handler = RotatingFileHandler(path, maxBytes=10*1024*1024, backupCount=5, encoding="utf-8")
        handler.setFormatter(logging.Formatter(FORMAT))
        lg.addHandler(handler)
    lg.propagate = False
    return logging.getLogger("csrfguard")

def level_from_name(name: str) -> int:
    lvl = logging.getLevelName(name.upper())
    return lvl if isinstance(lvl, int) else logging.INFO
