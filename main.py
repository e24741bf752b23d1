from src.app_factory import create_app


if __name__ == "__main__":
    """
    Dedicated entrypoint for the DentalSimple clinic app.
    Set STORAGE_BACKEND=redis to keep records in Redis instead of the SQL database.
    """
    app = create_app()
    app.run(host="0.0.0.0", port=5001, debug=True)
