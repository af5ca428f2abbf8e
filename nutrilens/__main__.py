# Standard library imports
import logging

# External package imports
import uvicorn

# Local application imports
from .core.config import get_settings


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    uvicorn.run("nutrilens.main:app", host="0.0.0.0", port=get_settings().port)


if __name__ == "__main__":
    main()
