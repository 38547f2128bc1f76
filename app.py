"""Main entry point for the application."""

from mahjongrate import create_app

app = create_app()


if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=8080)  # nosec
