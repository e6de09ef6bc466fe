"""Run the hub with uvicorn: python -m gymhub"""
import uvicorn

from gymhub.config import Config


def main() -> None:
    uvicorn.run("gymhub.main:app", host=Config.HOST, port=Config.PORT, log_level=Config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
