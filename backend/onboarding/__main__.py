"""Run the API with uvicorn: `python -m onboarding`."""
import uvicorn

from .config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("onboarding.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
