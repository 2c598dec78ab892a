import uvicorn

from csrfguard import config
from csrfguard.logging import level_from_name, setup as setup_logging

def main():
    level = level_from_name(config.LOG_LEVEL)
    lg = setup_logging(level)
    lg.info("serving csrf tokens on %s:%d ttl=%.1fs", config.WEB_HOST, config.WEB_PORT, config.CSRF_TTL)
    uvicorn.run("api.main:app", host=config.WEB_HOST, port=config.WEB_PORT, log_level=config.LOG_LEVEL.lower())

if __name__ == "__main__":
    main()
