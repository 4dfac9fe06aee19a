# server.py
import uvicorn
from main import config
from common.config import get_int_env

if __name__ == "__main__":
    uvicorn.run(
        "main:app",  # Routers are mounted in main.py so reload workers see them
        host="0.0.0.0",
        port=get_int_env("PORT", 8080),
        reload=config.environment != "production",
        log_level=config.logging.level_value.lower(),
    )
