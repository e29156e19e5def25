import os

import uvicorn

from api.app import create_app


def main():
    # settings come from the environment (.env is loaded by config.settings)
    app = create_app()

    uvicorn.run(
        app,
        host=os.getenv("APP_HOST", "127.0.0.1"),
        port=int(os.getenv("APP_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
