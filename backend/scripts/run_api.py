import logging
import os

import uvicorn


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.environ.get("API_HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "3000"))
    uvicorn.run("storefront_admin.main:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
